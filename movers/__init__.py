"""Daily top gainers and losers, scraped once and cached for the process lifetime."""
