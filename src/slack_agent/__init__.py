"""Slack Agent - A Slack bot that answers mentions by delegating to an external AI agent CLI.

This package listens for Slack messages, decides whether the bot was addressed,
and relays the request to an agent script running in a per-thread session directory.

Components:
- main_socket: Socket Mode event listener
- main_ingest: Events API (HTTP) listener
- dispatcher: dedup, mention filtering and background dispatch
- agent: external agent process client
- slack: Slack API integration
- store: in-memory dedup guard
"""
