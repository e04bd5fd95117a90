"""Terminal REPL for chatting with a local Ollama model and running code alongside it."""
