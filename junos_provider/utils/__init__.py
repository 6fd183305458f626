"""Shared utilities: configuration, logging, error handling and timeouts"""
