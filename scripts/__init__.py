"""
Package marker for scripts to allow running as a module:

    python3 -m scripts.verify_calculation

This avoids import issues for 'pyimpact'.
"""
