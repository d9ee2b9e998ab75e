"""Fixed demonstration content shown in sample data mode."""

from datetime import UTC, datetime, timedelta

from taskdigest.agent.models import AgentRunResult, HistoryEntry, SourceEmail, Task


def sample_run() -> AgentRunResult:
    return AgentRunResult(
        tasks=[
            Task(
                description="Review and approve Q1 budget proposal from Finance team",
                priority="High",
                source_email=SourceEmail(
                    subject="Q1 Budget Proposal - Needs Approval",
                    sender="finance@company.com",
                ),
                deadline="Today, 5:00 PM",
            ),
            Task(
                description="Schedule project kickoff meeting with development team",
                priority="Medium",
                source_email=SourceEmail(
                    subject="New Project: Dashboard Redesign",
                    sender="pm@company.com",
                ),
                deadline="This Week",
            ),
            Task(
                description="Respond to client inquiry about feature request",
                priority="High",
                source_email=SourceEmail(
                    subject="Feature Request: Export Functionality",
                    sender="client@example.com",
                ),
                deadline="Tomorrow, 2:00 PM",
            ),
            Task(
                description="Review team performance reports for monthly meeting",
                priority="Low",
                source_email=SourceEmail(
                    subject="Monthly Performance Summary",
                    sender="hr@company.com",
                ),
                deadline="End of Week",
            ),
            Task(
                description="Update documentation for API integration process",
                priority="Medium",
                source_email=SourceEmail(
                    subject="API Documentation Updates Needed",
                    sender="dev@company.com",
                ),
            ),
        ],
        emails_processed=47,
        generated_at=datetime.now(tz=UTC).isoformat(),
        status="success",
    )


def sample_history() -> list[HistoryEntry]:
    now = datetime.now(tz=UTC)
    return [
        HistoryEntry(
            date=(now - timedelta(days=1)).isoformat(),
            tasks=[
                Task(
                    description="Complete quarterly performance reviews",
                    priority="High",
                    source_email=SourceEmail(subject="Q4 Reviews Due", sender="hr@company.com"),
                ),
                Task(
                    description="Update project timeline with stakeholders",
                    priority="Medium",
                    source_email=SourceEmail(
                        subject="Project Timeline Discussion", sender="pm@company.com"
                    ),
                ),
            ],
            emails_processed=32,
            status="success",
        ),
        HistoryEntry(
            date=(now - timedelta(days=2)).isoformat(),
            tasks=[
                Task(
                    description="Review contract renewal proposals",
                    priority="High",
                    source_email=SourceEmail(
                        subject="Contract Renewals - Action Required", sender="legal@company.com"
                    ),
                ),
            ],
            emails_processed=28,
            status="success",
        ),
    ]
