"""Fund approval request client: form state, schema rendering and REST access."""
