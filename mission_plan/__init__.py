"""Mission plan ingestion for LLM-generated robot plans"""
