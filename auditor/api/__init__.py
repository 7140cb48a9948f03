"""HTTP read interface"""
