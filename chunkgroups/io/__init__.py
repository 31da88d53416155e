"""Input and output helpers: stats files, ignore files, reports."""
