"""RQ worker for scrape tasks."""
