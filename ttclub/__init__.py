"""ttclub: table-tennis club toolkit backed by Supabase."""

__version__ = "0.1.0"
