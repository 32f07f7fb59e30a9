"""shared utilities for sportstat"""
