"""
Growth Track Signups Pipeline.

Reads Growth Track signup notifications from Gmail, records them in a
Google Sheets spreadsheet and mails an Excel export of the new signups.
"""

__version__ = "1.0.0"
