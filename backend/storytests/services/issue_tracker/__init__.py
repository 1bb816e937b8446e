from .jira_client import IssueLookup, JiraClient, parse_issue

__all__ = ["IssueLookup", "JiraClient", "parse_issue"]
