"""Commit Herald - A Slack bot that turns new commits into reviewed X posts.

This package watches GitHub repositories for new commits, summarizes the
changes with an LLM and drafts a short post that a human approves in Slack
before it is published to X.

Components:
- main_socket: Socket Mode listener and background commit watcher
- main_api: HTTP API for generating and publishing posts
- pipeline: review state machine, watcher and chat commands
- llm: summarizer and post composer
- retrieval: GitHub commit fetching
- social: X publishing
- store: in-memory sessions and repository watermarks
- mlops: MLflow tracing
"""
