"""
StudyLoop command line interface.

Commands read a JSON history snapshot and render results with Rich.
"""
