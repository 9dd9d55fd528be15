"""Application layer: configuration, ticket PDFs, WhatsApp messages and the entry point."""
