"""Request enrichment and analysis pipeline (validate -> enrich -> classify -> record)."""
