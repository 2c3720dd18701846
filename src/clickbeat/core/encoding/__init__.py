"""Wire encodings."""
