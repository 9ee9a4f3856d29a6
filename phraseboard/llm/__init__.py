"""LLM access: structured transcript analysis and streaming chat."""
