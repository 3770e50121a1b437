"""Job dispatch."""
from company_scraper_core.dispatch.dispatcher import dispatch_job, parse_url_list

__all__ = ["dispatch_job", "parse_url_list"]
