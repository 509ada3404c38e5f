"""
Core logic: chunking, change detection, search and sync orchestration.
"""
