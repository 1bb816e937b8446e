from .issue import IssueFetchRequest, IssueFetchResponse, JiraIssue

__all__ = ["IssueFetchRequest", "IssueFetchResponse", "JiraIssue"]
