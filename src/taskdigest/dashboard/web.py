"""Web interface for the daily email task digest.

Serves a single dashboard page showing:
- Status overview (next scheduled run, last run status, emails processed)
- Today's tasks extracted by the agent
- Rolling task history
- Schedule status, recent scheduled runs and agent info
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from taskdigest.dashboard.controller import DashboardController
from taskdigest.dashboard.store import Preferences

logger = structlog.get_logger(__name__)


class SampleDataRequest(BaseModel):
    """Request to switch sample data mode."""

    enabled: bool


class DashboardWebServer:
    """Web server for the task digest dashboard."""

    def __init__(self, controller: DashboardController, host: str = "127.0.0.1", port: int = 8000):
        """Initialize web server.

        Args:
            controller: Dashboard state container
            host: Host to bind to
            port: Port to bind to
        """
        self.controller = controller
        self.host = host
        self.port = port
        self.app = FastAPI(title="Daily Email Task Agent", lifespan=self._lifespan)

        # Setup routes
        self._setup_routes()

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        await self.controller.initialize()
        logger.info("dashboard_initialized", schedule_loaded=self.controller.schedule_info is not None)
        yield
        await self.controller.aclose()

    def _setup_routes(self):
        """Setup FastAPI routes."""

        @self.app.get("/", response_class=HTMLResponse)
        async def dashboard():
            """Serve the main dashboard."""
            return self._get_dashboard_html()

        @self.app.get("/health")
        async def health():
            return {"status": "ok"}

        @self.app.get("/api/state")
        async def get_state():
            """Get the current page state."""
            return self.controller.snapshot()

        @self.app.post("/api/sample-data")
        async def set_sample_data(request: SampleDataRequest):
            """Toggle sample data mode."""
            self.controller.set_sample_data_mode(request.enabled)
            return self.controller.snapshot()

        @self.app.post("/api/run")
        async def run_now():
            """Run the agent now."""
            await self.controller.run_now()
            return self.controller.snapshot()

        @self.app.post("/api/schedule/toggle")
        async def toggle_schedule():
            """Pause or resume the schedule."""
            await self.controller.toggle_schedule()
            return self.controller.snapshot()

        @self.app.post("/api/schedule/trigger")
        async def trigger_schedule():
            """Trigger a scheduled run immediately."""
            await self.controller.trigger_schedule_now()
            return self.controller.snapshot()

        @self.app.post("/api/schedule/refresh")
        async def refresh_schedule():
            """Reload schedule info and recent runs."""
            await self.controller.load_schedule_info()
            await self.controller.load_schedule_runs()
            return self.controller.snapshot()

        @self.app.post("/api/tasks/{index}/toggle")
        async def toggle_task(index: int):
            """Expand or collapse a task card."""
            try:
                expanded = self.controller.toggle_task_expanded(index)
            except IndexError:
                raise HTTPException(status_code=404, detail=f"No task at index {index}")
            return {"index": index, "expanded": expanded}

        @self.app.get("/api/settings")
        async def get_preferences():
            """Get stored settings dialog fields."""
            return self.controller.get_preferences().model_dump()

        @self.app.put("/api/settings")
        async def save_preferences(request: Preferences):
            """Save settings dialog fields."""
            preferences = self.controller.save_preferences(
                request.recipient_email, request.scheduled_time
            )
            return preferences.model_dump()

    def _get_dashboard_html(self) -> str:
        """Generate dashboard HTML."""
        html = """
<!DOCTYPE html>
<html>
<head>
    <title>Daily Email Task Agent</title>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <style>
        :root {
            --background: hsl(35 29% 95%);
            --foreground: hsl(30 22% 14%);
            --card: hsl(35 29% 92%);
            --primary: hsl(27 61% 26%);
            --primary-foreground: hsl(35 29% 98%);
            --secondary: hsl(35 20% 88%);
            --accent: hsl(43 75% 38%);
            --destructive: hsl(0 84% 60%);
            --border: hsl(27 61% 26%);
            --muted: hsl(35 15% 85%);
            --muted-foreground: hsl(30 20% 45%);
            --radius: 0.5rem;
        }

        * {
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }

        body {
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif;
            background: var(--background);
            color: var(--foreground);
            padding: 24px;
        }

        h1, h2, .serif {
            font-family: Georgia, "Times New Roman", serif;
        }

        .container {
            max-width: 1280px;
            margin: 0 auto;
        }

        header {
            display: flex;
            justify-content: space-between;
            align-items: center;
            margin-bottom: 24px;
        }

        h1 {
            font-size: 30px;
            letter-spacing: 0.5px;
        }

        .subtitle {
            color: var(--muted-foreground);
            margin-top: 4px;
        }

        .header-controls {
            display: flex;
            align-items: center;
            gap: 16px;
            font-size: 14px;
        }

        .connected { color: #16a34a; }
        .disconnected { color: var(--destructive); }

        .card {
            background: var(--card);
            border: 1px solid var(--border);
            border-radius: var(--radius);
            padding: 20px;
            margin-bottom: 24px;
        }

        .card-title {
            font-size: 18px;
            font-weight: 600;
            margin-bottom: 4px;
            display: flex;
            justify-content: space-between;
            align-items: center;
        }

        .card-description {
            color: var(--muted-foreground);
            font-size: 14px;
            margin-bottom: 16px;
        }

        .overview {
            display: grid;
            grid-template-columns: repeat(3, 1fr);
            gap: 24px;
            margin-top: 12px;
        }

        .label {
            font-size: 13px;
            color: var(--muted-foreground);
        }

        .value {
            font-size: 24px;
            font-weight: 600;
            font-family: Georgia, serif;
        }

        .actions {
            display: flex;
            flex-wrap: wrap;
            gap: 12px;
            margin-bottom: 24px;
        }

        button {
            font: inherit;
            font-size: 14px;
            padding: 8px 16px;
            border-radius: var(--radius);
            border: 1px solid var(--border);
            background: transparent;
            color: var(--foreground);
            cursor: pointer;
        }

        button.primary {
            background: var(--primary);
            color: var(--primary-foreground);
        }

        button:disabled {
            opacity: 0.5;
            cursor: not-allowed;
        }

        button.ghost {
            border: none;
            width: 100%;
            color: var(--muted-foreground);
            font-size: 12px;
        }

        .layout {
            display: grid;
            grid-template-columns: 2fr 1fr;
            gap: 24px;
        }

        .scroll {
            max-height: 600px;
            overflow-y: auto;
            padding-right: 8px;
        }

        .task-card {
            background: var(--background);
            border: 1px solid var(--border);
            border-radius: var(--radius);
            padding: 16px;
            margin-bottom: 16px;
        }

        .task-header {
            display: flex;
            justify-content: space-between;
            gap: 12px;
            margin-bottom: 12px;
        }

        .task-description {
            font-family: Georgia, serif;
            font-weight: 600;
            line-height: 1.6;
        }

        .task-source {
            font-size: 14px;
            color: var(--muted-foreground);
        }

        .task-source strong {
            color: var(--foreground);
        }

        .deadline {
            color: var(--accent);
            font-size: 14px;
            font-weight: 500;
            margin: 8px 0;
        }

        .task-details {
            border-top: 1px solid var(--border);
            padding-top: 8px;
            font-size: 14px;
            line-height: 1.8;
        }

        .badge {
            display: inline-block;
            padding: 2px 8px;
            border-radius: 12px;
            font-size: 12px;
            font-weight: 600;
            border: 1px solid var(--border);
            white-space: nowrap;
        }

        .badge-default { background: var(--primary); color: var(--primary-foreground); }
        .badge-destructive { background: var(--destructive); color: #fff; border-color: var(--destructive); }
        .badge-outline { background: transparent; }

        .priority-high { background: #fee2e2; color: #991b1b; border-color: #fca5a5; }
        .priority-medium { background: #fef3c7; color: #92400e; border-color: #fcd34d; }
        .priority-low { background: #dcfce7; color: #166534; border-color: #86efac; }
        .priority-unknown { background: var(--muted); color: var(--muted-foreground); }

        .history-entry {
            border: 1px solid var(--border);
            border-radius: var(--radius);
            background: var(--background);
            padding: 16px;
            margin-bottom: 16px;
        }

        .history-header {
            display: flex;
            justify-content: space-between;
            margin-bottom: 12px;
        }

        .history-task {
            display: flex;
            gap: 8px;
            font-size: 14px;
            margin-bottom: 6px;
        }

        .history-task span.text { flex: 1; }

        .row {
            display: flex;
            justify-content: space-between;
            align-items: center;
            font-size: 14px;
            margin-bottom: 10px;
        }

        .run-row {
            display: flex;
            justify-content: space-between;
            padding-bottom: 10px;
            margin-bottom: 10px;
            border-bottom: 1px solid var(--muted);
            font-size: 14px;
        }

        .empty-state {
            text-align: center;
            padding: 40px 0;
            color: var(--muted-foreground);
        }

        .modal {
            display: none;
            position: fixed;
            z-index: 1000;
            left: 0;
            top: 0;
            width: 100%;
            height: 100%;
            background-color: rgba(0, 0, 0, 0.5);
        }

        .modal.active {
            display: flex;
            align-items: center;
            justify-content: center;
        }

        .modal-content {
            background: var(--card);
            border: 1px solid var(--border);
            border-radius: var(--radius);
            padding: 24px;
            width: 90%;
            max-width: 480px;
        }

        .field {
            margin: 16px 0;
        }

        .field label {
            display: block;
            font-weight: 500;
            margin-bottom: 6px;
        }

        .field input {
            width: 100%;
            padding: 8px;
            border-radius: var(--radius);
            border: 1px solid var(--muted-foreground);
            background: var(--background);
            font: inherit;
        }

        .modal-actions {
            display: flex;
            justify-content: flex-end;
            gap: 12px;
        }

        @media (max-width: 900px) {
            .layout, .overview { grid-template-columns: 1fr; }
        }
    </style>
</head>
<body>
    <div class="container">
        <header>
            <div>
                <h1>Daily Email Task Agent</h1>
                <div class="subtitle">Automated email analysis and task extraction</div>
            </div>
            <div class="header-controls">
                <label>
                    Sample Data
                    <input type="checkbox" id="sampleToggle" onchange="setSampleData(this.checked)">
                </label>
                <button onclick="openSettings()" title="Settings">&#9881;</button>
                <span id="connection"></span>
            </div>
        </header>

        <div class="card">
            <div class="card-title">Status Overview</div>
            <div class="overview" id="overview"></div>
        </div>

        <div class="actions" id="actions"></div>

        <div class="layout">
            <div>
                <div class="card">
                    <div class="card-title"><span>Today's Tasks</span><span id="taskCount"></span></div>
                    <div class="card-description" id="taskDescription"></div>
                    <div id="taskList"></div>
                </div>
                <div class="card">
                    <div class="card-title">Task History</div>
                    <div class="card-description">Previous daily summaries (last 30 days)</div>
                    <div id="historyList"></div>
                </div>
            </div>
            <div>
                <div class="card">
                    <div class="card-title">Schedule Status</div>
                    <div id="schedulePanel"></div>
                </div>
                <div class="card">
                    <div class="card-title">Recent Runs</div>
                    <div class="card-description">Last 10 scheduled executions</div>
                    <div id="runsList"></div>
                </div>
                <div class="card">
                    <div class="card-title">Agent Info</div>
                    <div id="agentInfo"></div>
                </div>
            </div>
        </div>
    </div>

    <div id="settingsModal" class="modal">
        <div class="modal-content">
            <h2>Settings</h2>
            <div class="card-description">Configure your daily email task digest preferences</div>
            <div class="field">
                <label for="email">Recipient Email</label>
                <input id="email" type="email" placeholder="your.email@example.com">
            </div>
            <div class="field">
                <label for="time">Scheduled Time</label>
                <input id="time" type="time">
                <div class="label">Timezone: __DISPLAY_TIMEZONE__</div>
            </div>
            <div class="modal-actions">
                <button onclick="closeSettings()">Cancel</button>
                <button class="primary" onclick="saveSettings()">Save Changes</button>
            </div>
        </div>
    </div>

    <script>
        function escapeHtml(text) {
            const div = document.createElement('div');
            div.textContent = text == null ? '' : String(text);
            return div.innerHTML;
        }

        async function fetchState() {
            try {
                const response = await fetch('/api/state');
                render(await response.json());
            } catch (error) {
                console.error('Failed to fetch state:', error);
            }
        }

        async function post(url, body) {
            const options = { method: 'POST' };
            if (body !== undefined) {
                options.headers = { 'Content-Type': 'application/json' };
                options.body = JSON.stringify(body);
            }
            const response = await fetch(url, options);
            return response.json();
        }

        async function action(url, body) {
            // Reflect loading flags while the call is in flight
            const pending = post(url, body);
            setTimeout(fetchState, 100);
            try {
                render(await pending);
            } catch (error) {
                console.error(`Request to ${url} failed:`, error);
            }
        }

        function setSampleData(enabled) { action('/api/sample-data', { enabled }); }
        function runNow() { action('/api/run'); }
        function toggleSchedule() { action('/api/schedule/toggle'); }
        function triggerSchedule() { action('/api/schedule/trigger'); }

        async function toggleTask(index) {
            try {
                await post(`/api/tasks/${index}/toggle`);
                await fetchState();
            } catch (error) {
                console.error('Failed to toggle task:', error);
            }
        }

        async function openSettings() {
            const response = await fetch('/api/settings');
            const prefs = await response.json();
            document.getElementById('email').value = prefs.recipient_email;
            document.getElementById('time').value = prefs.scheduled_time;
            document.getElementById('settingsModal').classList.add('active');
        }

        function closeSettings() {
            document.getElementById('settingsModal').classList.remove('active');
        }

        async function saveSettings() {
            const response = await fetch('/api/settings', {
                method: 'PUT',
                headers: { 'Content-Type': 'application/json' },
                body: JSON.stringify({
                    recipient_email: document.getElementById('email').value,
                    scheduled_time: document.getElementById('time').value,
                }),
            });
            if (response.ok) {
                closeSettings();
            } else {
                console.error('Failed to save settings:', await response.text());
            }
        }

        function render(state) {
            document.getElementById('sampleToggle').checked = state.sample_data_mode;

            const connection = document.getElementById('connection');
            connection.className = state.connection_status;
            connection.textContent = state.connection_status === 'connected' ? '\\u2714 Connected' : '\\u26A0 Disconnected';

            const o = state.overview;
            document.getElementById('overview').innerHTML = `
                <div>
                    <div class="label">Next Scheduled Run</div>
                    <div class="value">${escapeHtml(o.next_run)}</div>
                    ${o.schedule_description ? `<div class="label">${escapeHtml(o.schedule_description)}</div>` : ''}
                </div>
                <div>
                    <div class="label">Last Run Status</div>
                    <div class="value">${o.last_run_ok ? '\\u2714 ' : '\\u23F1 '}${escapeHtml(o.last_run_status)}</div>
                </div>
                <div>
                    <div class="label">Emails Processed</div>
                    <div class="value">${o.emails_processed}</div>
                </div>
            `;

            const a = state.actions;
            document.getElementById('actions').innerHTML = `
                <button class="primary" onclick="runNow()" ${a.run_disabled ? 'disabled' : ''}>${escapeHtml(a.run_label)}</button>
                ${a.toggle_visible ? `<button onclick="toggleSchedule()" ${a.toggle_disabled ? 'disabled' : ''}>${escapeHtml(a.toggle_label)}</button>` : ''}
                <button onclick="triggerSchedule()" ${a.trigger_disabled ? 'disabled' : ''}>Trigger Scheduled Run</button>
            `;

            const t = state.tasks;
            document.getElementById('taskCount').innerHTML = t.count_label
                ? `<span class="badge badge-outline">${escapeHtml(t.count_label)}</span>` : '';
            document.getElementById('taskDescription').textContent = t.description;
            document.getElementById('taskList').innerHTML = t.items.length === 0 ? `
                <div class="empty-state">
                    <div>No tasks available</div>
                    <div class="label">${escapeHtml(t.empty_hint)}</div>
                </div>
            ` : `<div class="scroll">${t.items.map(renderTask).join('')}</div>`;

            document.getElementById('historyList').innerHTML = state.history.length === 0
                ? '<div class="empty-state">No history available</div>'
                : `<div class="scroll">${state.history.map(renderHistory).join('')}</div>`;

            const s = state.schedule;
            document.getElementById('schedulePanel').innerHTML = s ? `
                <div class="row"><span class="label">Status</span>
                    <span class="badge ${s.is_active ? 'badge-default' : 'badge-outline'}">${escapeHtml(s.status)}</span></div>
                <div class="row"><span class="label">Schedule</span><span>${escapeHtml(s.schedule)}</span></div>
                <div class="row"><span class="label">Timezone</span><span>${escapeHtml(s.timezone)}</span></div>
                <div class="row"><span class="label">Next Run</span><span>${escapeHtml(s.next_run)}</span></div>
            ` : '<div class="empty-state">Loading schedule...</div>';

            document.getElementById('runsList').innerHTML = state.runs.length === 0
                ? '<div class="empty-state">No run history available</div>'
                : state.runs.map(run => `
                    <div class="run-row">
                        <div>
                            <div>${escapeHtml(run.started)}</div>
                            ${run.completed ? `<div class="label">${escapeHtml(run.completed)}</div>` : ''}
                        </div>
                        <span class="badge badge-${run.badge}">${escapeHtml(run.status)}</span>
                    </div>
                `).join('');

            const info = state.agent_info;
            document.getElementById('agentInfo').innerHTML = `
                <div class="row"><span class="label">Agent</span><code>${escapeHtml(info.name)}</code></div>
                <div class="row"><span class="label">Type</span><code>${escapeHtml(info.type)}</code></div>
                <div class="row"><span class="label">Status</span><span class="badge badge-outline">${escapeHtml(info.status)}</span></div>
            `;
        }

        function renderTask(task) {
            return `
                <div class="task-card">
                    <div class="task-header">
                        <div class="task-description">${escapeHtml(task.description)}</div>
                        <span class="badge ${task.priority_class}">${escapeHtml(task.priority)}</span>
                    </div>
                    <div class="task-source">
                        <strong>${escapeHtml(task.subject)}</strong>
                        <div>From: ${escapeHtml(task.sender)}</div>
                    </div>
                    ${task.deadline ? `<div class="deadline">Deadline: ${escapeHtml(task.deadline)}</div>` : ''}
                    <button class="ghost" onclick="toggleTask(${task.index})">${task.expanded ? 'Show less' : 'Show full details'}</button>
                    ${task.expanded ? `
                        <div class="task-details">
                            <div><strong>Full Description:</strong> ${escapeHtml(task.description)}</div>
                            <div><strong>Priority Level:</strong> ${escapeHtml(task.priority)}</div>
                            <div><strong>Source:</strong> ${escapeHtml(task.source)}</div>
                            ${task.deadline ? `<div><strong>Due By:</strong> ${escapeHtml(task.deadline)}</div>` : ''}
                        </div>
                    ` : ''}
                </div>
            `;
        }

        function renderHistory(entry) {
            return `
                <div class="history-entry">
                    <div class="history-header">
                        <strong>${escapeHtml(entry.date)}</strong>
                        <span class="label">${escapeHtml(entry.emails_label)}
                            <span class="badge ${entry.status_ok ? 'badge-default' : 'badge-destructive'}">${escapeHtml(entry.status)}</span>
                        </span>
                    </div>
                    ${entry.tasks.map(task => `
                        <div class="history-task">
                            <span class="label">&bull;</span>
                            <span class="text">${escapeHtml(task.description)}</span>
                            <span class="badge badge-outline">${escapeHtml(task.priority)}</span>
                        </div>
                    `).join('')}
                    ${entry.more_label ? `<div class="label">${escapeHtml(entry.more_label)}</div>` : ''}
                </div>
            `;
        }

        // Close modal on escape key
        document.addEventListener('keydown', (e) => {
            if (e.key === 'Escape') {
                closeSettings();
            }
        });

        // Close modal when clicking outside
        document.getElementById('settingsModal').addEventListener('click', (e) => {
            if (e.target.id === 'settingsModal') {
                closeSettings();
            }
        });

        // Initialize
        fetchState();
        setInterval(fetchState, 5000); // Keep countdown and schedule state fresh
    </script>
</body>
</html>
        """
        return html.replace("__DISPLAY_TIMEZONE__", self.controller.settings.display_timezone)

    async def start(self):
        """Start the web server."""
        import uvicorn

        config = uvicorn.Config(
            self.app,
            host=self.host,
            port=self.port,
            log_level="warning",  # Reduce noise
            access_log=False,
        )
        server = uvicorn.Server(config)

        logger.info("web_server_starting", host=self.host, port=self.port, url=self.get_url())
        await server.serve()

    def get_url(self) -> str:
        """Get the URL for the web interface."""
        return f"http://{self.host}:{self.port}"
