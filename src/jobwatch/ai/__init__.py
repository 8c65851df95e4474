"""
Language model access for jobwatch.

- **model_client.py**: ``load_model`` / ``send_chat_request`` over the
  AsyncOpenAI client, with optional per-request timeout and an optional
  single-flight ``InferenceQueue`` for backends that cannot serve concurrent
  requests.
- **classifier.py**: The job-post classifier: fixed system prompt, strict JSON
  schema, fail-closed parsing into a tagged verdict.
"""
