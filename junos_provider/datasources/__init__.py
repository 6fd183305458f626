"""Read-only data sources"""
