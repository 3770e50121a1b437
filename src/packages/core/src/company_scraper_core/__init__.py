"""Company data extraction: fetching, extraction waterfall, jobs and workers."""
