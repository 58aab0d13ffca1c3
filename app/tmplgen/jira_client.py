from __future__ import annotations

from jira import JIRA
from jira.exceptions import JIRAError
from requests.exceptions import RequestException

from .config import Settings, mask_secret
from .errors import ExternalCallError
from .models import TicketRef
from .retry import with_retry


def get_jira_client(settings: Settings) -> JIRA:
    settings.require_jira()
    print("🔗 Connecting to Jira...")
    print(f"   Server: {settings.jira_base_url}")
    print(f"   Username: {settings.jira_username}")
    print(f"   Token: {mask_secret(settings.jira_token)}")
    try:
        return JIRA(
            server=settings.jira_base_url,
            basic_auth=(settings.jira_username, settings.jira_token),
            get_server_info=False,
        )
    except (JIRAError, RequestException) as e:
        raise ExternalCallError(f"Could not connect to Jira: {e}") from e


def _issue(jira: JIRA, issue_key: str):
    try:
        return jira.issue(issue_key)
    except JIRAError as e:
        status = e.status_code or 0
        raise ExternalCallError(
            f"Jira request for {issue_key} failed ({e.status_code}): {e.text}",
            retryable=status == 429 or status >= 500 or status == 0,
        ) from e
    except RequestException as e:
        raise ExternalCallError(f"Jira request for {issue_key} failed: {e}") from e


def to_ticket(issue) -> TicketRef:
    fields = issue.fields
    status = getattr(fields, "status", None)
    return TicketRef(
        key=issue.key,
        summary=getattr(fields, "summary", "") or "",
        status=getattr(status, "name", "") or "",
        description=getattr(fields, "description", "") or "",
    )


def fetch_ticket(jira: JIRA, issue_key: str, retries: int = 3, backoff: float = 2.0) -> TicketRef:
    print(f"📋 Fetching Jira issue: {issue_key}")
    issue = with_retry(_issue, jira, issue_key, max_retries=retries, base_delay=backoff)
    ticket = to_ticket(issue)
    print(f"   ✅ Found issue: {ticket.summary}")
    print(f"   📝 Description length: {len(ticket.description)} characters")
    return ticket
