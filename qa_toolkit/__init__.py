"""QA engineering toolkit: LLM-backed test-case and Postman script generation."""
