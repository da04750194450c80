"""Synchronous HTTP proxy for asynchronous video generation backends."""
