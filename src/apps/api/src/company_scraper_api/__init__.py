"""HTTP API for scraping jobs."""
