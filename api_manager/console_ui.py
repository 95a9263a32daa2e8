from __future__ import annotations

CONSOLE_UI_HTML = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>API Connection Manager</title>
  <style>
    :root {
      --bg: #f5f7fb;
      --panel: #ffffff;
      --text: #162334;
      --muted: #5d6f84;
      --border: #d6dce5;
      --accent: #1653b5;
      --ok: #0f7a42;
      --warn: #9a5b00;
      --err: #b82727;
      --off: #8a94a3;
    }

    * {
      box-sizing: border-box;
    }

    body {
      margin: 0;
      padding: 1.25rem;
      background: var(--bg);
      color: var(--text);
      font-family: "IBM Plex Sans", "Segoe UI", Arial, sans-serif;
      line-height: 1.45;
    }

    .wrap {
      max-width: 1200px;
      margin: 0 auto;
      display: grid;
      gap: 1rem;
    }

    .panel {
      background: var(--panel);
      border: 1px solid var(--border);
      border-radius: 12px;
      padding: 1rem 1.1rem;
    }

    h1 {
      margin: 0;
      font-size: 1.35rem;
    }

    label {
      display: block;
      font-size: 0.85rem;
      color: var(--muted);
      margin: 0.5rem 0 0.2rem;
    }

    input, select {
      width: 100%;
      padding: 0.45rem 0.55rem;
      border: 1px solid var(--border);
      border-radius: 8px;
      font: inherit;
    }

    button {
      padding: 0.45rem 0.8rem;
      border: 1px solid var(--accent);
      border-radius: 8px;
      background: var(--accent);
      color: #fff;
      font: inherit;
      cursor: pointer;
    }

    button.secondary {
      background: #fff;
      color: var(--accent);
    }

    button:disabled {
      opacity: 0.5;
      cursor: not-allowed;
    }

    .row {
      display: flex;
      gap: 0.5rem;
      flex-wrap: wrap;
      margin-top: 0.75rem;
    }

    .badge {
      display: inline-block;
      padding: 0.15rem 0.55rem;
      border-radius: 999px;
      color: #fff;
      font-size: 0.8rem;
      background: var(--off);
    }

    .badge.on {
      background: var(--ok);
    }

    .badge.off {
      background: var(--err);
    }

    .tabs button.active {
      background: var(--accent);
      color: #fff;
    }

    table {
      width: 100%;
      border-collapse: collapse;
      font-size: 0.9rem;
    }

    th, td {
      border-bottom: 1px solid var(--border);
      padding: 0.35rem 0.45rem;
      text-align: left;
      vertical-align: top;
    }

    pre {
      background: #0f1722;
      color: #d7e3f4;
      padding: 0.75rem;
      border-radius: 8px;
      overflow: auto;
      max-height: 320px;
    }

    #notifications div {
      padding: 0.35rem 0.6rem;
      border-radius: 6px;
      margin-bottom: 0.35rem;
      font-size: 0.9rem;
    }

    .n-success { background: #e3f5ea; color: var(--ok); }
    .n-warning { background: #fff3dc; color: var(--warn); }
    .n-error { background: #fde6e6; color: var(--err); }
    .n-info { background: #e6eefc; color: var(--accent); }
  </style>
</head>
<body>
  <div class="wrap">
    <div class="panel">
      <h1>API Connection Manager</h1>
      <p>Connect, test, and interact with any REST API.</p>
    </div>

    <div class="panel">
      <label for="url">API URL</label>
      <input id="url" placeholder="https://jsonplaceholder.typicode.com/posts">
      <label for="apiKey">API Key (Optional)</label>
      <input id="apiKey" type="password">
      <label for="token">Token (Optional)</label>
      <input id="token" type="password">
      <div class="row">
        <button id="testBtn" class="secondary">Test Connection</button>
        <button id="connectBtn">Connect</button>
        <button id="refreshBtn" class="secondary">Refresh</button>
        <button id="disconnectBtn" class="secondary">Disconnect</button>
      </div>
      <div class="row" id="methods"></div>
      <div id="status"></div>
    </div>

    <div class="panel" id="notifications"></div>

    <div class="panel">
      <div class="row tabs" id="tabs"></div>
      <div id="tabBody"></div>
    </div>
  </div>

  <script>
    (function () {
      const urlEl = document.getElementById("url");
      const apiKeyEl = document.getElementById("apiKey");
      const tokenEl = document.getElementById("token");
      const methodsEl = document.getElementById("methods");
      const statusEl = document.getElementById("status");
      const notificationsEl = document.getElementById("notifications");
      const tabsEl = document.getElementById("tabs");
      const tabBodyEl = document.getElementById("tabBody");

      let sessionId = null;
      let state = null;
      let activeTab = "GET";
      let busy = false;
      let postFields = [{ key: "", value: "", type: "text" }];

      function setBusy(value) {
        busy = value;
        document.querySelectorAll("button").forEach(function (button) {
          button.disabled = value;
        });
      }

      function notify(level, message) {
        const item = document.createElement("div");
        item.className = "n-" + level;
        item.textContent = message;
        notificationsEl.prepend(item);
        while (notificationsEl.children.length > 8) {
          notificationsEl.removeChild(notificationsEl.lastChild);
        }
      }

      async function ensureSession() {
        if (sessionId) {
          return sessionId;
        }
        const response = await fetch("/console/sessions", { method: "POST" });
        const body = await response.json();
        sessionId = body.session_id;
        return sessionId;
      }

      async function call(method, path, body) {
        if (busy) {
          return false;
        }
        setBusy(true);
        try {
          const id = await ensureSession();
          const options = { method: method, headers: { "Content-Type": "application/json" } };
          if (body !== undefined) {
            options.body = JSON.stringify(body);
          }
          const response = await fetch("/console/sessions/" + id + path, options);
          const payload = await response.json();
          if (!response.ok) {
            notify("error", payload.detail ? String(payload.detail) : ("Request failed: " + response.status));
            if (response.status === 404) {
              sessionId = null;
            }
            return false;
          }
          (payload.notifications || []).forEach(function (item) {
            notify(item.level, item.message);
          });
          state = payload.session;
          render();
          return true;
        } catch (error) {
          notify("error", "Console request failed: " + error.message);
          return false;
        } finally {
          setBusy(false);
          renderTabs();
        }
      }

      async function withConfig(path) {
        const saved = await call("PUT", "/config", { url: urlEl.value, api_key: apiKeyEl.value, token: tokenEl.value });
        if (saved) {
          await call("POST", path);
        }
      }

      function renderMethods() {
        methodsEl.innerHTML = "";
        const methods = state ? state.methods : [];
        methods.forEach(function (item) {
          const badge = document.createElement("span");
          badge.className = "badge " + (state.connected || item.supported ? (item.supported ? "on" : "off") : "");
          badge.textContent = item.method;
          methodsEl.appendChild(badge);
        });
        statusEl.textContent = state && state.connected ? "Connected to " + state.url : "Not connected";
      }

      function isSupported(method) {
        if (!state) {
          return false;
        }
        return state.methods.some(function (item) {
          return item.method === method && item.supported;
        });
      }

      function renderTabs() {
        tabsEl.innerHTML = "";
        ["GET", "POST", "PUT", "DELETE"].forEach(function (method) {
          const button = document.createElement("button");
          button.className = "secondary" + (activeTab === method ? " active" : "");
          button.textContent = method;
          button.disabled = busy || !isSupported(method);
          button.addEventListener("click", function () {
            activeTab = method;
            render();
          });
          tabsEl.appendChild(button);
        });
      }

      function renderTable(action) {
        const table = document.createElement("table");
        const columns = state ? state.columns : [];
        if (!columns.length) {
          const empty = document.createElement("p");
          empty.textContent = "No data available";
          return empty;
        }
        const head = document.createElement("tr");
        columns.forEach(function (column) {
          const th = document.createElement("th");
          th.textContent = column.charAt(0).toUpperCase() + column.slice(1);
          head.appendChild(th);
        });
        if (action) {
          head.appendChild(document.createElement("th"));
        }
        table.appendChild(head);

        state.rows.forEach(function (row, index) {
          const tr = document.createElement("tr");
          const inputs = {};
          columns.forEach(function (column) {
            const td = document.createElement("td");
            const value = row[column] === undefined || row[column] === null ? "" : row[column];
            const text = typeof value === "object" ? JSON.stringify(value) : String(value);
            if (action === "PUT") {
              const input = document.createElement("input");
              input.value = text;
              inputs[column] = input;
              td.appendChild(input);
            } else {
              td.textContent = text;
            }
            tr.appendChild(td);
          });
          if (action) {
            const td = document.createElement("td");
            const button = document.createElement("button");
            button.textContent = action === "PUT" ? "Save" : "Delete";
            button.addEventListener("click", function () {
              if (action === "PUT") {
                const edits = {};
                Object.keys(inputs).forEach(function (column) {
                  const original = row[column] === undefined || row[column] === null ? "" : String(row[column]);
                  if (inputs[column].value !== original) {
                    edits[column] = inputs[column].value;
                  }
                });
                call("PUT", "/records/" + index, { edits: edits });
              } else if (window.confirm("Delete this row?")) {
                call("DELETE", "/records/" + index);
              }
            });
            td.appendChild(button);
            tr.appendChild(td);
          }
          table.appendChild(tr);
        });
        return table;
      }

      function renderPostForm() {
        const container = document.createElement("div");
        postFields.forEach(function (field, index) {
          const row = document.createElement("div");
          row.className = "row";
          const key = document.createElement("input");
          key.placeholder = "key";
          key.value = field.key;
          key.addEventListener("input", function () { field.key = key.value; });
          const value = document.createElement("input");
          value.placeholder = "value";
          value.value = field.value;
          value.addEventListener("input", function () { field.value = value.value; });
          const type = document.createElement("select");
          ["text", "number"].forEach(function (option) {
            const element = document.createElement("option");
            element.value = option;
            element.textContent = option === "text" ? "Text" : "Number";
            element.selected = field.type === option;
            type.appendChild(element);
          });
          type.addEventListener("change", function () { field.type = type.value; });
          const remove = document.createElement("button");
          remove.className = "secondary";
          remove.textContent = "-";
          remove.disabled = postFields.length <= 1;
          remove.addEventListener("click", function () {
            postFields.splice(index, 1);
            render();
          });
          [key, value, type, remove].forEach(function (element) { row.appendChild(element); });
          container.appendChild(row);
        });
        const actions = document.createElement("div");
        actions.className = "row";
        const add = document.createElement("button");
        add.className = "secondary";
        add.textContent = "Add field";
        add.addEventListener("click", function () {
          postFields.push({ key: "", value: "", type: "text" });
          render();
        });
        const submit = document.createElement("button");
        submit.textContent = "Send POST";
        submit.addEventListener("click", function () {
          call("POST", "/records", { fields: postFields });
        });
        actions.appendChild(add);
        actions.appendChild(submit);
        container.appendChild(actions);
        return container;
      }

      function renderBody() {
        tabBodyEl.innerHTML = "";
        if (activeTab === "GET") {
          const fetchBtn = document.createElement("button");
          fetchBtn.textContent = "Fetch Data";
          fetchBtn.addEventListener("click", function () { call("POST", "/fetch"); });
          tabBodyEl.appendChild(fetchBtn);
          tabBodyEl.appendChild(renderTable(null));
          if (state && state.data !== null && state.data !== undefined) {
            const pre = document.createElement("pre");
            pre.textContent = JSON.stringify(state.data, null, 2);
            tabBodyEl.appendChild(pre);
          }
        } else if (activeTab === "POST") {
          tabBodyEl.appendChild(renderPostForm());
        } else {
          tabBodyEl.appendChild(renderTable(activeTab));
        }
      }

      function render() {
        renderMethods();
        renderTabs();
        renderBody();
      }

      document.getElementById("testBtn").addEventListener("click", function () { withConfig("/test"); });
      document.getElementById("connectBtn").addEventListener("click", function () { withConfig("/connect"); });
      document.getElementById("refreshBtn").addEventListener("click", function () { call("POST", "/refresh"); });
      document.getElementById("disconnectBtn").addEventListener("click", function () { call("POST", "/disconnect"); });

      render();
    })();
  </script>
</body>
</html>
"""
