"""
jobwatch - LLM-assisted job-post moderation for Discord

jobwatch watches guild messages and flags job postings and recruitment pitches
(including users listing their skills to attract recruiters) to moderators.

Core Components:

- **Classifier**: one bounded, low-temperature chat request per message with a
  strict ``{"violates_rules": bool}`` structured-output schema, served by any
  OpenAI-compatible endpoint
- **Moderation Handler**: filters out DMs, bots, its own messages and
  unmoderated guilds, then reports violations to the guild's report channel
- **Evaluation Harness**: replays a labelled message set through the
  classifier to validate prompt changes before deployment

Usage:
    from jobwatch.main import main
    main()
"""
