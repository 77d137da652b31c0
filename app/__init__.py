"""Document management service: document metadata plus blob storage."""
