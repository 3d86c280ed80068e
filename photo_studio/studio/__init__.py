"""Studio photo generation: prompts, background pass and slot orchestration."""
