"""
Example suites against public demo sites.

Run one with, for example:

    harness suites.multi_tab --browsers chromium,firefox,webkit
"""
