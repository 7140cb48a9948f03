"""Core domain: configuration, models and the Audit facade"""
