"""index_ping.parser: разбор документов sitemap."""
