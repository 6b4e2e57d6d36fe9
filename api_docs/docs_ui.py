from __future__ import annotations

DOCS_UI_HTML = """<!doctype html>
<html lang="pt-BR">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>PenguimPay API Reference</title>
  <style>
    :root {
      --bg: #f4f6fa;
      --panel: #ffffff;
      --sidebar: #0f1b2d;
      --sidebar-text: #c9d4e3;
      --text: #142033;
      --muted: #5f6f84;
      --border: #d8dee8;
      --accent: #1f6feb;
      --code-bg: #0d1a2b;
      --code-text: #c8d3e0;
      --ok: #0f7a42;
      --warn: #9a5b00;
      --err: #b82727;
    }

    * { box-sizing: border-box; }

    body {
      margin: 0;
      display: flex;
      height: 100vh;
      overflow: hidden;
      background: var(--bg);
      color: var(--text);
      font-family: "IBM Plex Sans", "Segoe UI", Arial, sans-serif;
    }

    aside {
      width: 320px;
      flex-shrink: 0;
      display: flex;
      flex-direction: column;
      background: var(--sidebar);
      color: var(--sidebar-text);
    }

    aside header { padding: 1.1rem 1.25rem; border-bottom: 1px solid #22324a; }
    aside header h1 { margin: 0; font-size: 1.05rem; color: #fff; }
    aside header span { font-size: 0.75rem; opacity: 0.6; }

    .session { padding: 0.75rem 1rem; display: grid; gap: 0.5rem; border-bottom: 1px solid #22324a; }
    .session input, .search input {
      width: 100%;
      padding: 0.45rem 0.6rem;
      border-radius: 6px;
      border: 1px solid #2b3d57;
      background: #17263b;
      color: #e6edf6;
      font: 0.8rem ui-monospace, Menlo, monospace;
    }
    .session label { font-size: 0.7rem; display: flex; gap: 0.4rem; align-items: center; }

    .search { padding: 0.75rem 1rem; }
    nav { flex: 1; overflow-y: auto; padding: 0 0.5rem 1rem; }
    nav h2 {
      margin: 0.9rem 0.5rem 0.3rem;
      font-size: 0.7rem;
      text-transform: uppercase;
      letter-spacing: 0.08em;
      opacity: 0.6;
    }
    nav button {
      display: flex;
      gap: 0.5rem;
      align-items: center;
      width: 100%;
      padding: 0.4rem 0.5rem;
      border: 0;
      border-radius: 6px;
      background: transparent;
      color: inherit;
      text-align: left;
      font-size: 0.85rem;
      cursor: pointer;
    }
    nav button:hover, nav button.active { background: #1b2c44; color: #fff; }

    main { flex: 1; overflow-y: auto; padding: 2rem; }
    .card { max-width: 900px; margin: 0 auto; background: var(--panel); border: 1px solid var(--border); border-radius: 12px; }
    .section { padding: 0.9rem 1.25rem; border-bottom: 1px solid var(--border); }
    .section:last-child { border-bottom: 0; }
    .section h3 { margin: 0 0 0.5rem; font-size: 0.7rem; text-transform: uppercase; letter-spacing: 0.08em; color: var(--muted); display: flex; gap: 0.5rem; align-items: center; }
    .title { display: flex; gap: 0.75rem; align-items: center; }
    .title h2 { margin: 0; font-size: 1.15rem; }
    .description { white-space: pre-line; color: var(--muted); font-size: 0.9rem; line-height: 1.5; }

    .method { font: 700 0.72rem ui-monospace, Menlo, monospace; padding: 0.2rem 0.5rem; border-radius: 5px; border: 1px solid; }
    .method-GET { color: #0f7a42; border-color: #9fd8b8; background: #eaf8f0; }
    .method-POST { color: #0b5fa5; border-color: #a7cdee; background: #eaf3fc; }
    .method-PUT { color: #9a5b00; border-color: #ecd19c; background: #fdf5e6; }
    .method-PATCH { color: #b2520b; border-color: #f0c29e; background: #fdf0e6; }
    .method-DELETE { color: #b82727; border-color: #eeb0b0; background: #fcebeb; }

    code.url, pre {
      display: block;
      margin: 0;
      padding: 0.7rem;
      border-radius: 8px;
      font: 0.8rem ui-monospace, Menlo, monospace;
      white-space: pre-wrap;
      word-break: break-all;
    }
    code.url { background: var(--bg); }
    pre { background: var(--code-bg); color: var(--code-text); max-height: 28rem; overflow: auto; }

    table { width: 100%; border-collapse: collapse; font: 0.78rem ui-monospace, Menlo, monospace; }
    td { padding: 0.35rem 0.5rem; border-bottom: 1px solid var(--border); }
    td:first-child { width: 35%; }

    .fields { display: grid; gap: 0.5rem; grid-template-columns: repeat(auto-fill, minmax(220px, 1fr)); }
    .fields label { display: grid; gap: 0.2rem; font-size: 0.75rem; color: var(--muted); }
    .fields input, textarea {
      padding: 0.45rem 0.6rem;
      border: 1px solid var(--border);
      border-radius: 6px;
      font: 0.8rem ui-monospace, Menlo, monospace;
    }
    textarea { width: 100%; min-height: 10rem; resize: vertical; }

    .copy { border: 0; background: none; color: var(--accent); font-size: 0.7rem; cursor: pointer; }
    .send { padding: 0.5rem 1.2rem; border: 0; border-radius: 8px; background: var(--accent); color: #fff; cursor: pointer; }
    .send:disabled { opacity: 0.5; cursor: progress; }
    .badge { font: 700 0.72rem ui-monospace, Menlo, monospace; padding: 0.15rem 0.45rem; border-radius: 5px; }
    .badge.ok { color: var(--ok); background: #eaf8f0; }
    .badge.warn { color: var(--warn); background: #fdf5e6; }
    .badge.err { color: var(--err); background: #fcebeb; }
    .info { color: var(--accent); font-size: 0.7rem; font-weight: 700; text-transform: uppercase; }
    .hidden { display: none; }
  </style>
</head>
<body>
  <aside>
    <header>
      <h1>PenguimPay</h1>
      <span>API Documentation</span>
    </header>
    <div class="session">
      <input id="token" type="password" placeholder="Bearer Token (sua publickey)" autocomplete="off">
      <input id="baseUrl" type="text" placeholder="Base URL">
      <label><input id="viaRelay" type="checkbox" checked> Enviar pelo proxy</label>
    </div>
    <div class="search"><input id="search" type="search" placeholder="Buscar endpoint..."></div>
    <nav id="nav"></nav>
  </aside>

  <main>
    <div id="welcome" class="card">
      <div class="section">
        <h2>PenguimPay API</h2>
        <p class="description">Bem-vindo a documentacao da API PenguimPay. Aqui voce encontra os endpoints para gerar PIX In (recebimentos), PIX Out (saques), gerenciar webhooks e compliance. Insira seu Bearer Token na sidebar para testar os endpoints diretamente.</p>
      </div>
    </div>

    <div id="detail" class="card hidden">
      <div class="section">
        <div class="title">
          <span id="method" class="method"></span>
          <h2 id="name"></h2>
          <span id="infoBadge" class="info hidden">Informativo</span>
        </div>
      </div>
      <div class="section" id="descriptionSection"><div id="description" class="description"></div></div>
      <div class="section">
        <h3>URL <button class="copy" data-copy="url">copiar</button></h3>
        <code id="url" class="url"></code>
      </div>
      <div class="section" id="headersSection">
        <h3>Headers</h3>
        <table id="headers"></table>
      </div>
      <div class="section hidden" id="querySection">
        <h3>Query Parameters</h3>
        <table id="query"></table>
      </div>
      <div class="section hidden" id="fieldsSection">
        <h3>Parametros</h3>
        <div id="fields" class="fields"></div>
      </div>
      <div class="section hidden" id="bodySection">
        <h3><span id="bodyLabel">Request Body</span> <button class="copy" data-copy="body">copiar</button></h3>
        <textarea id="body" spellcheck="false"></textarea>
        <pre id="bodyExample" class="hidden"></pre>
      </div>
      <div class="section" id="curlSection">
        <h3>cURL <button class="copy" data-copy="curl">copiar</button></h3>
        <pre id="curl"></pre>
      </div>
      <div class="section" id="sendSection">
        <button id="send" class="send" type="button">Enviar Request</button>
      </div>
      <div class="section hidden" id="responseSection">
        <h3>Response <span id="status" class="badge"></span> <span id="elapsed"></span> <button class="copy" data-copy="response">copiar</button></h3>
        <pre id="response"></pre>
      </div>
    </div>
  </main>

  <script>
    (function () {
      const state = { endpoint: null, bodyEdited: false, busy: false, config: null };
      const $ = function (id) { return document.getElementById(id); };

      function overrides() {
        const formValues = {};
        document.querySelectorAll("#fields input").forEach(function (input) {
          if (input.value !== "") {
            formValues[input.name] = input.value;
          }
        });
        return {
          bearer_token: $("token").value,
          base_url: $("baseUrl").value || null,
          form_values: formValues,
          body_override: state.bodyEdited ? $("body").value : null
        };
      }

      async function postJson(url, payload) {
        const response = await fetch(url, {
          method: "POST",
          headers: { "Content-Type": "application/json" },
          body: JSON.stringify(payload)
        });
        return { status: response.status, data: await response.json() };
      }

      function fillTable(table, rows) {
        table.innerHTML = "";
        rows.forEach(function (row) {
          const tr = document.createElement("tr");
          [row.key, row.value].forEach(function (value) {
            const td = document.createElement("td");
            td.textContent = value;
            tr.appendChild(td);
          });
          table.appendChild(tr);
        });
      }

      function prettyBody(text) {
        try {
          return JSON.stringify(JSON.parse(text), null, 2);
        } catch (_) {
          return text;
        }
      }

      async function refreshPreview() {
        const endpoint = state.endpoint;
        if (!endpoint) {
          return;
        }
        if (endpoint.info_only) {
          $("url").textContent = ($("baseUrl").value || state.config.default_base_url) + endpoint.path;
          fillTable($("headers"), endpoint.headers);
          return;
        }
        const result = await postJson("/api/endpoints/" + endpoint.id + "/preview", overrides());
        if (result.status !== 200) {
          $("url").textContent = result.data.detail || "Erro ao montar request";
          return;
        }
        $("url").textContent = result.data.url;
        fillTable($("headers"), result.data.display_headers);
        $("curl").textContent = result.data.curl;
        if (!state.bodyEdited && result.data.body !== null) {
          $("body").value = result.data.body;
        }
      }

      function renderOutcome(outcome) {
        const status = $("status");
        status.className = "badge";
        if (outcome.status_code === 0) {
          status.textContent = "ERR";
          status.classList.add("err");
        } else {
          status.textContent = outcome.status_code;
          status.classList.add(outcome.status_code >= 200 && outcome.status_code < 300 ? "ok" : "warn");
        }
        $("elapsed").textContent = outcome.elapsed_ms + "ms";
        $("response").textContent = outcome.error
          ? JSON.stringify({ error: "Request failed", message: outcome.error }, null, 2)
          : outcome.body;
      }

      async function sendViaRelay() {
        const preview = await postJson("/api/endpoints/" + state.endpoint.id + "/preview", overrides());
        if (preview.status !== 200) {
          return { status_code: 0, elapsed_ms: 0, error: preview.data.detail };
        }
        const relayed = await postJson("/api/proxy", {
          url: preview.data.url,
          method: preview.data.method,
          headers: preview.data.headers,
          requestBody: preview.data.body
        });
        if (relayed.status === 200) {
          return {
            status_code: relayed.data.status,
            elapsed_ms: relayed.data.time,
            body: prettyBody(relayed.data.body)
          };
        }
        return {
          status_code: relayed.status === 500 ? 0 : relayed.status,
          elapsed_ms: 0,
          error: relayed.data.message || relayed.data.error || relayed.data.detail
        };
      }

      async function sendDirect() {
        const result = await postJson("/api/endpoints/" + state.endpoint.id + "/send", overrides());
        if (result.status !== 200) {
          return { status_code: result.status, elapsed_ms: 0, error: result.data.detail };
        }
        return result.data;
      }

      async function sendRequest() {
        if (state.busy || !state.endpoint || state.endpoint.info_only) {
          return;
        }
        state.busy = true;
        $("send").disabled = true;
        $("send").textContent = "Enviando...";
        $("responseSection").classList.remove("hidden");
        $("response").textContent = "Aguardando resposta...";
        try {
          renderOutcome($("viaRelay").checked ? await sendViaRelay() : await sendDirect());
        } catch (error) {
          renderOutcome({ status_code: 0, elapsed_ms: 0, error: error.message || "Network error or CORS issue" });
        } finally {
          state.busy = false;
          $("send").disabled = false;
          $("send").textContent = "Enviar Request";
        }
      }

      function renderFields(detail) {
        const container = $("fields");
        container.innerHTML = "";
        const inputs = detail.path_params.map(function (name) {
          return { key: name, label: ":" + name, placeholder: name, type: "text" };
        }).concat(detail.endpoint.form_fields);

        inputs.forEach(function (field) {
          const label = document.createElement("label");
          label.textContent = field.label;
          const input = document.createElement("input");
          input.name = field.key;
          input.placeholder = field.placeholder || "";
          input.type = field.type === "number" ? "number" : "text";
          input.step = "any";
          input.addEventListener("input", function () {
            state.bodyEdited = false;
            refreshPreview();
          });
          label.appendChild(input);
          container.appendChild(label);
        });
        $("fieldsSection").classList.toggle("hidden", inputs.length === 0 || detail.endpoint.info_only);
      }

      async function selectEndpoint(id) {
        const response = await fetch("/api/endpoints/" + encodeURIComponent(id));
        const detail = await response.json();
        const endpoint = detail.endpoint;
        state.endpoint = endpoint;
        state.bodyEdited = false;

        document.querySelectorAll("nav button").forEach(function (button) {
          button.classList.toggle("active", button.dataset.id === id);
        });
        $("welcome").classList.add("hidden");
        $("detail").classList.remove("hidden");
        $("responseSection").classList.add("hidden");

        $("method").textContent = endpoint.method;
        $("method").className = "method method-" + endpoint.method;
        $("name").textContent = endpoint.name;
        $("infoBadge").classList.toggle("hidden", !endpoint.info_only);
        $("description").textContent = endpoint.description || "";
        $("descriptionSection").classList.toggle("hidden", !endpoint.description);
        $("headersSection").classList.toggle("hidden", endpoint.headers.length === 0);

        fillTable($("query"), endpoint.query_params);
        $("querySection").classList.toggle("hidden", endpoint.query_params.length === 0);

        $("bodySection").classList.toggle("hidden", detail.example_body === null);
        $("bodyLabel").textContent = endpoint.info_only ? "Exemplo de Payload" : "Request Body";
        $("body").classList.toggle("hidden", endpoint.info_only);
        $("bodyExample").classList.toggle("hidden", !endpoint.info_only);
        $("body").value = detail.example_body || "";
        $("bodyExample").textContent = detail.example_body || "";

        $("curlSection").classList.toggle("hidden", endpoint.info_only);
        $("sendSection").classList.toggle("hidden", endpoint.info_only);

        renderFields(detail);
        await refreshPreview();
      }

      async function loadCatalog() {
        const search = $("search").value;
        const response = await fetch("/api/catalog?search=" + encodeURIComponent(search));
        const catalog = await response.json();
        const nav = $("nav");
        nav.innerHTML = "";

        function renderNode(node) {
          if (node.kind === "category") {
            const heading = document.createElement("h2");
            heading.textContent = node.name;
            nav.appendChild(heading);
            node.children.forEach(renderNode);
            return;
          }
          const button = document.createElement("button");
          button.type = "button";
          button.dataset.id = node.id;
          button.classList.toggle("active", state.endpoint !== null && state.endpoint.id === node.id);
          const method = document.createElement("span");
          method.className = "method method-" + node.method;
          method.textContent = node.method;
          const name = document.createElement("span");
          name.textContent = node.name;
          button.appendChild(method);
          button.appendChild(name);
          button.addEventListener("click", function () { selectEndpoint(node.id); });
          nav.appendChild(button);
        }

        catalog.categories.forEach(renderNode);
      }

      function copyText(kind, button) {
        const sources = {
          url: $("url").textContent,
          body: state.endpoint && state.endpoint.info_only ? $("bodyExample").textContent : $("body").value,
          curl: $("curl").textContent,
          response: $("response").textContent
        };
        navigator.clipboard.writeText(sources[kind] || "");
        button.textContent = "copiado!";
        setTimeout(function () { button.textContent = "copiar"; }, 2000);
      }

      document.querySelectorAll("button.copy").forEach(function (button) {
        button.addEventListener("click", function () { copyText(button.dataset.copy, button); });
      });
      $("body").addEventListener("input", function () {
        state.bodyEdited = true;
        refreshPreview();
      });
      ["token", "baseUrl"].forEach(function (id) {
        $(id).addEventListener("input", refreshPreview);
      });
      $("search").addEventListener("input", loadCatalog);
      $("send").addEventListener("click", sendRequest);

      fetch("/api/config").then(function (response) { return response.json(); }).then(function (config) {
        state.config = config;
        $("baseUrl").placeholder = config.default_base_url;
        loadCatalog();
      });
    })();
  </script>
</body>
</html>
"""
