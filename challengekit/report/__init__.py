"""Markdown, JSON and HTML reports, master summaries and run history."""