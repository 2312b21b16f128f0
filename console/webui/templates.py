"""Static HTML templates for the admin console views."""

_BASE_STYLE = r"""
  <style>
    :root {
      --bg: #0b0d12;
      --panel: #141821;
      --panel-2: #191e29;
      --text: #eef1f6;
      --muted: #9aa4b5;
      --accent: #ef4444;
      --accent-2: #f97316;
      --danger: #ff6b6b;
      --warn: #f7c266;
      --success: #4ade80;
      --border: rgba(255, 255, 255, 0.06);
      --shadow: 0 14px 48px rgba(0, 0, 0, 0.4);
      --card-radius: 14px;
      --font: "Inter", "Manrope", "Segoe UI", system-ui, -apple-system, sans-serif;
    }
    * { box-sizing: border-box; }
    body {
      margin: 0;
      font-family: var(--font);
      background: radial-gradient(circle at 10% 10%, rgba(239,68,68,0.06), transparent 35%), var(--bg);
      color: var(--text);
      min-height: 100vh;
    }
    a { color: var(--accent); text-decoration: none; }
    .page { max-width: 1240px; margin: 0 auto; padding: 28px 22px 48px; }
    .narrow { max-width: 420px; margin: 80px auto; }
    header {
      display: flex;
      align-items: center;
      justify-content: space-between;
      gap: 14px;
      margin-bottom: 18px;
    }
    .brand { display: flex; align-items: center; gap: 10px; }
    .brand .mark {
      width: 38px;
      height: 38px;
      border-radius: 12px;
      background: linear-gradient(135deg, var(--accent), var(--accent-2));
      display: grid;
      place-items: center;
      color: #fff;
      font-weight: 700;
      box-shadow: var(--shadow);
    }
    .brand h1 { margin: 0; font-size: 20px; }
    .tagline { color: var(--muted); font-size: 13px; margin: 0; }
    nav { display: flex; gap: 8px; align-items: center; flex-wrap: wrap; }
    nav a {
      padding: 9px 12px;
      border: 1px solid var(--border);
      border-radius: 12px;
      color: var(--text);
      background: rgba(255, 255, 255, 0.02);
    }
    nav a.active { border-color: var(--accent); color: var(--accent); }
    .cards {
      display: grid;
      gap: 12px;
      grid-template-columns: repeat(auto-fit, minmax(220px, 1fr));
      margin: 12px 0 6px;
    }
    .card {
      background: linear-gradient(160deg, var(--panel), var(--panel-2));
      border: 1px solid var(--border);
      border-radius: var(--card-radius);
      padding: 16px;
      box-shadow: var(--shadow);
    }
    .card h3 { margin: 0 0 8px; font-size: 14px; color: var(--muted); }
    .card .value { font-size: 24px; font-weight: 700; }
    .card .sub { margin-top: 6px; color: var(--muted); font-size: 12px; }
    .card img { width: 100%; height: 180px; object-fit: cover; border-radius: 10px; background: #000; }
    section {
      background: rgba(255, 255, 255, 0.02);
      border: 1px solid var(--border);
      border-radius: var(--card-radius);
      padding: 18px;
      box-shadow: var(--shadow);
      margin-top: 16px;
    }
    section h2 { margin: 0 0 4px; font-size: 17px; }
    section p.lead { margin: 0 0 12px; color: var(--muted); font-size: 13px; }
    table { width: 100%; border-collapse: collapse; }
    th, td { padding: 10px; border-bottom: 1px solid var(--border); text-align: left; font-size: 13px; }
    th { color: var(--muted); font-weight: 600; }
    .muted { color: var(--muted); }
    .pill {
      display: inline-block;
      padding: 3px 9px;
      border-radius: 999px;
      border: 1px solid var(--border);
      font-size: 12px;
    }
    .pill.warn { color: var(--warn); border-color: rgba(247,194,102,0.3); }
    .pill.danger { color: var(--danger); border-color: rgba(255,107,107,0.3); }
    .pill.success { color: var(--success); border-color: rgba(74,222,128,0.3); }
    form { display: grid; gap: 12px; }
    label { display: grid; gap: 6px; font-size: 13px; color: var(--muted); }
    label.inline { display: flex; align-items: center; gap: 8px; }
    input, select, textarea {
      background: #0d1017;
      color: var(--text);
      border: 1px solid var(--border);
      border-radius: 10px;
      padding: 10px 12px;
      font-family: var(--font);
    }
    input:disabled { opacity: 0.5; }
    button {
      background: linear-gradient(135deg, var(--accent), var(--accent-2));
      border: none;
      color: #fff;
      padding: 10px 14px;
      border-radius: 10px;
      font-weight: 600;
      cursor: pointer;
    }
    button:disabled { opacity: 0.5; cursor: not-allowed; }
    button.ghost { background: transparent; border: 1px solid var(--border); color: var(--text); }
    .actions { display: flex; gap: 6px; flex-wrap: wrap; align-items: center; }
    .toolbar { display: flex; gap: 10px; flex-wrap: wrap; align-items: center; margin: 12px 0; }
    .toolbar input { flex: 1; max-width: 360px; }
    .grid-items { display: grid; gap: 14px; grid-template-columns: repeat(auto-fill, minmax(240px, 1fr)); }
    .error { color: var(--danger); font-size: 13px; min-height: 16px; }
    .ok { color: var(--success); font-size: 13px; }
    .modal-backdrop {
      position: fixed;
      inset: 0;
      background: rgba(0,0,0,0.7);
      display: none;
      align-items: center;
      justify-content: center;
      z-index: 20;
    }
    .modal-backdrop.show { display: flex; }
    .modal {
      background: var(--panel);
      border: 1px solid var(--border);
      border-radius: var(--card-radius);
      padding: 20px;
      width: min(720px, 94vw);
      max-height: 90vh;
      overflow: auto;
    }
    .toast {
      position: fixed;
      right: 20px;
      top: 20px;
      padding: 12px 16px;
      border-radius: 12px;
      background: var(--panel-2);
      border: 1px solid var(--border);
      display: none;
      z-index: 30;
    }
    .toast.show { display: block; }
    .view { display: none; }
    .view.active { display: block; }
    @media (max-width: 720px) {
      header { flex-direction: column; align-items: flex-start; }
      table { font-size: 12px; }
    }
  </style>
"""

_AUTH_SCRIPT = r"""
  <script>
    async function postJson(url, body) {
      let res;
      try {
        res = await fetch(url, {
          method: "POST",
          headers: { "Content-Type": "application/json" },
          body: JSON.stringify(body),
        });
      } catch (e) {
        throw new Error("Something went wrong");
      }
      let data = {};
      try { data = await res.json(); } catch (e) { data = {}; }
      if (!res.ok) throw new Error(data.error || "Something went wrong");
      return data;
    }
    function setText(id, text) { document.getElementById(id).textContent = text || ""; }
  </script>
"""

LOGIN_HTML = r"""
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Admin Login</title>
""" + _BASE_STYLE + r"""
</head>
<body>
  <div class="narrow">
    <section>
      <h2>Admin Login</h2>
      <p class="lead">Sign in to manage content, members and payments.</p>
      <form id="login-form">
        <label>Username
          <input name="username" autocomplete="username" required />
        </label>
        <label>Password
          <input name="password" type="password" autocomplete="current-password" required />
        </label>
        <div class="error" id="login-error"></div>
        <div class="ok" id="login-ok"></div>
        <button type="submit" id="login-submit">Login</button>
        <a href="/forgot-password">Forgot password?</a>
      </form>
    </section>
  </div>
""" + _AUTH_SCRIPT + r"""
  <script>
    document.getElementById("login-form").addEventListener("submit", async (e) => {
      e.preventDefault();
      setText("login-error", "");
      setText("login-ok", "");
      const btn = document.getElementById("login-submit");
      btn.disabled = true;
      const form = new FormData(e.target);
      try {
        const data = await postJson("/api/login", {
          username: form.get("username"),
          password: form.get("password"),
        });
        setText("login-ok", data.message);
        setTimeout(() => { window.location.href = data.redirect || "/dashboard"; }, 1000);
      } catch (err) {
        setText("login-error", err.message);
      }
      btn.disabled = false;
    });
  </script>
</body>
</html>
"""

FORGOT_PASSWORD_HTML = r"""
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Forgot Password</title>
""" + _BASE_STYLE + r"""
</head>
<body>
  <div class="narrow">
    <section>
      <h2>Forgot Password</h2>
      <p class="lead">Enter your admin email to reset password:</p>
      <form id="forgot-form">
        <label>Email
          <input name="email" type="email" placeholder="Admin email address" required />
        </label>
        <div class="error" id="forgot-error"></div>
        <div class="ok" id="forgot-ok"></div>
        <button type="submit" id="forgot-submit">Send OTP</button>
        <a href="/login">Login?</a>
      </form>
    </section>
  </div>
""" + _AUTH_SCRIPT + r"""
  <script>
    document.getElementById("forgot-form").addEventListener("submit", async (e) => {
      e.preventDefault();
      setText("forgot-error", "");
      setText("forgot-ok", "");
      const btn = document.getElementById("forgot-submit");
      btn.disabled = true;
      btn.textContent = "Sending OTP...";
      try {
        const data = await postJson("/api/forgot-password", { email: new FormData(e.target).get("email") });
        setText("forgot-ok", data.message);
        setTimeout(() => { window.location.href = data.redirect; }, 1500);
      } catch (err) {
        setText("forgot-error", err.message);
      }
      btn.disabled = false;
      btn.textContent = "Send OTP";
    });
  </script>
</body>
</html>
"""

RESET_PASSWORD_HTML = r"""
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Reset Password</title>
""" + _BASE_STYLE + r"""
</head>
<body>
  <div class="narrow">
    <section>
      <h2>Reset Password</h2>
      <p class="lead">Enter the 6-digit code sent to your email and choose a new password.</p>
      <form id="reset-form">
        <label>Email
          <input name="email" id="reset-email" type="email" disabled />
        </label>
        <label>OTP
          <input name="otp" inputmode="numeric" maxlength="6" placeholder="OTP (from email)" required />
        </label>
        <label>New Password
          <input name="newPassword" type="password" required />
        </label>
        <label>Confirm New Password
          <input name="confirmPassword" type="password" required />
        </label>
        <label class="inline"><input type="checkbox" id="reset-show" /> Show passwords</label>
        <div class="error" id="reset-error"></div>
        <div class="ok" id="reset-ok"></div>
        <button type="submit" id="reset-submit">Reset Password</button>
        <a href="/login">Back to login</a>
      </form>
    </section>
  </div>
""" + _AUTH_SCRIPT + r"""
  <script>
    const params = new URLSearchParams(window.location.search);
    document.getElementById("reset-email").value = params.get("email") || "";
    document.getElementById("reset-show").addEventListener("change", (e) => {
      document.querySelectorAll("#reset-form input[type=password], #reset-form input[data-pw]").forEach(el => {
        el.dataset.pw = "1";
        el.type = e.target.checked ? "text" : "password";
      });
    });
    document.getElementById("reset-form").addEventListener("submit", async (e) => {
      e.preventDefault();
      setText("reset-error", "");
      setText("reset-ok", "");
      const form = new FormData(e.target);
      if (form.get("newPassword") !== form.get("confirmPassword")) {
        setText("reset-error", "Passwords do not match!");
        return;
      }
      const btn = document.getElementById("reset-submit");
      btn.disabled = true;
      try {
        const data = await postJson("/api/reset-password", {
          email: document.getElementById("reset-email").value,
          otp: form.get("otp"),
          newPassword: form.get("newPassword"),
          confirmPassword: form.get("confirmPassword"),
        });
        setText("reset-ok", data.message);
        setTimeout(() => { window.location.href = data.redirect || "/login"; }, 1400);
      } catch (err) {
        setText("reset-error", err.message);
      }
      btn.disabled = false;
    });
  </script>
</body>
</html>
"""

CONSOLE_HTML = r"""
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>FitCoach Admin</title>
""" + _BASE_STYLE + r"""
</head>
<body>
  <div class="page">
    <header>
      <div class="brand">
        <div class="mark">FC</div>
        <div>
          <h1>FitCoach Admin</h1>
          <p class="tagline" id="admin-name">Signed in</p>
        </div>
      </div>
      <nav id="nav">
        <a href="#dashboard">Dashboard</a>
        <a href="#videos">Videos</a>
        <a href="#ebooks">E-Books</a>
        <a href="#certificates">Certificates</a>
        <a href="#members">Members</a>
        <a href="#plans">Plans</a>
        <a href="#purchases">Transactions</a>
        <a href="#receipts">Bank Transfers</a>
        <a href="#settings">Settings</a>
        <form method="post" action="/logout" style="display:inline;"><button class="ghost" type="submit">Logout</button></form>
      </nav>
    </header>

    <div class="view" id="view-dashboard">
      <section>
        <h2>Dashboard</h2>
        <p class="lead">Live platform statistics. Auto-refreshing every <span id="poll-interval">10</span> seconds.</p>
        <div class="cards" id="stats-cards"></div>
      </section>
      <section>
        <h2>Recent Members</h2>
        <table id="recent-members"><tbody></tbody></table>
      </section>
      <section>
        <h2>Recent Purchases</h2>
        <table id="recent-purchases"><tbody></tbody></table>
      </section>
      <section>
        <h2>Console Activity</h2>
        <div class="cards" id="activity"></div>
      </section>
    </div>

    <div class="view" id="view-videos">
      <section>
        <h2>Workout Videos</h2>
        <div class="toolbar">
          <input data-search="videos" placeholder="Search videos..." />
          <select data-filter="videos" data-name="category" id="video-category-filter"><option value="">All categories</option></select>
          <button type="button" onclick="openForm('videos')">Upload Video</button>
        </div>
        <div class="grid-items" id="list-videos"></div>
      </section>
    </div>

    <div class="view" id="view-ebooks">
      <section>
        <h2>E-Books</h2>
        <div class="toolbar">
          <input data-search="ebooks" placeholder="Search e-books..." />
          <button type="button" onclick="openForm('ebooks')">Upload E-Book</button>
        </div>
        <div class="grid-items" id="list-ebooks"></div>
      </section>
    </div>

    <div class="view" id="view-certificates">
      <section>
        <h2>Certificates</h2>
        <div class="toolbar">
          <input data-search="certificates" placeholder="Search certificates..." />
          <button type="button" onclick="openForm('certificates')">Upload Certificate</button>
        </div>
        <div class="grid-items" id="list-certificates"></div>
      </section>
    </div>

    <div class="view" id="view-members">
      <section>
        <h2>Members</h2>
        <div class="toolbar">
          <input data-search="members" placeholder="Search members..." />
          <select data-filter="members" data-name="plan" id="member-plan-filter"><option value="">All plans</option></select>
          <select data-filter="members" data-name="status">
            <option value="">All statuses</option>
            <option value="paid">Paid</option>
            <option value="pending">Pending</option>
            <option value="failed">Failed</option>
            <option value="cancelled">Cancelled</option>
            <option value="inactive">Inactive</option>
          </select>
        </div>
        <table><thead><tr><th>Member</th><th>Email</th><th>Plan</th><th>Status</th><th>Joined</th></tr></thead>
        <tbody id="list-members"></tbody></table>
      </section>
    </div>

    <div class="view" id="view-plans">
      <section>
        <h2>Plans</h2>
        <p class="lead">Subscription plans as configured with the payment provider.</p>
        <div class="toolbar"><input data-search="plans" placeholder="Search plans..." /></div>
        <div class="cards" id="list-plans"></div>
      </section>
    </div>

    <div class="view" id="view-purchases">
      <section>
        <h2>Transactions</h2>
        <div class="toolbar">
          <input data-search="purchases" placeholder="Search by user, email, item or transaction ID..." />
          <select data-filter="purchases" data-name="itemType" id="purchase-type-filter"><option value="">All types</option></select>
        </div>
        <table><thead><tr><th>User</th><th>Email</th><th>Item</th><th>Type</th><th>Amount (€)</th><th>Date</th><th>Transaction ID</th></tr></thead>
        <tbody id="list-purchases"></tbody></table>
      </section>
    </div>

    <div class="view" id="view-receipts">
      <section>
        <h2>Bank Transfers</h2>
        <div class="toolbar">
          <input data-search="receipts" placeholder="Search by user, email, or price ID..." />
          <select data-filter="receipts" data-name="status">
            <option value="">All statuses</option>
            <option value="pending">Pending</option>
            <option value="approved">Approved</option>
            <option value="rejected">Rejected</option>
          </select>
        </div>
        <table><thead><tr><th>User</th><th>Email</th><th>Price ID</th><th>Receipt</th><th>Status</th><th>Date</th><th>Action</th></tr></thead>
        <tbody id="list-receipts"></tbody></table>
      </section>
    </div>

    <div class="view" id="view-settings">
      <section>
        <h2>Admin Settings</h2>
        <form id="settings-form">
          <label>First Name <input name="firstName" /></label>
          <label>Last Name <input name="lastName" /></label>
          <label>Email Address <input name="email" type="email" /></label>
          <label>Current Password <input name="currentPassword" type="password" /></label>
          <label>New Password <input name="newPassword" type="password" /></label>
          <label>Confirm New Password <input name="confirmPassword" type="password" /></label>
          <div class="error" id="settings-error"></div>
          <button type="submit">Save Changes</button>
        </form>
      </section>
    </div>
  </div>

  <div class="modal-backdrop" id="form-modal">
    <div class="modal">
      <h2 id="form-title">Upload</h2>
      <form id="resource-form" enctype="multipart/form-data"></form>
    </div>
  </div>

  <div class="modal-backdrop" id="confirm-modal">
    <div class="modal">
      <h2 id="confirm-title">Are you sure?</h2>
      <p class="muted" id="confirm-text"></p>
      <div class="actions">
        <button type="button" id="confirm-yes">Yes, Delete</button>
        <button type="button" class="ghost" onclick="closeConfirm()">Cancel</button>
      </div>
    </div>
  </div>

  <div class="modal-backdrop" id="preview-modal">
    <div class="modal">
      <div class="actions" style="justify-content: space-between;">
        <h2 id="preview-title">Preview</h2>
        <button type="button" class="ghost" onclick="closePreview()">×</button>
      </div>
      <div id="preview-body" class="muted">Loading...</div>
    </div>
  </div>

  <div class="toast" id="toast"></div>

  <script>
    const state = {
      session: null,
      items: {},
      search: {},
      filters: {},
      categories: [],
      editing: null,
      preview: null,
      confirmAction: null,
      views: {},
      dashboardTimer: null,
    };

    const FORMS = {
      videos: {
        label: "Video",
        fields: [
          { name: "title", label: "Title *", required: true },
          { name: "category", label: "Category", type: "category" },
          { name: "level", label: "Level" },
          { name: "description", label: "Description", type: "textarea" },
          { name: "forMembersOnly", label: "For Members Only", type: "checkbox" },
          { name: "video", label: "Video file (MP4, MOV, AVI, WebM)", type: "file", accept: "video/*", requiredOnCreate: true },
          { name: "thumbnail", label: "Thumbnail", type: "file", accept: "image/*" },
        ],
      },
      ebooks: {
        label: "E-Book",
        fields: [
          { name: "title", label: "Title *", required: true },
          { name: "description", label: "Description", type: "textarea" },
          { name: "price", label: "Price (€)", type: "number" },
          { name: "isFree", label: "Free", type: "checkbox" },
          { name: "forMembersOnly", label: "For Members Only", type: "checkbox" },
          { name: "ebook", label: "Ebook file (PDF, JPG, PNG)", type: "file", accept: ".pdf,image/jpeg,image/png", requiredOnCreate: true },
          { name: "cover", label: "Cover image (JPG, PNG)", type: "file", accept: "image/jpeg,image/png", requiredOnCreate: true },
        ],
      },
      certificates: {
        label: "Certificate",
        fields: [
          { name: "name", label: "Name *", required: true },
          { name: "description", label: "Description", type: "textarea" },
          { name: "file", label: "Certificate PDF", type: "file", accept: "application/pdf", requiredOnCreate: true },
          { name: "thumb", label: "Cover (PNG, JPG)", type: "file", accept: "image/png,image/jpeg", requiredOnCreate: true },
        ],
      },
    };

    const api = {
      async json(path, opts = {}) {
        let res;
        try {
          res = await fetch(path, { credentials: "include", ...opts });
        } catch (e) {
          throw new Error("Something went wrong");
        }
        const text = await res.text();
        let data = {};
        try { data = text ? JSON.parse(text) : {}; } catch (e) { data = {}; }
        if (res.status === 401) {
          window.location.href = "/login";
          throw new Error("Authentication required");
        }
        if (!res.ok) {
          const err = new Error(data.error || (data.detail && (data.detail.error || data.detail)) || "Something went wrong");
          err.confirmRequired = !!data.confirm_required;
          throw err;
        }
        return data;
      },
      send(path, method, body) {
        return this.json(path, { method, headers: { "Content-Type": "application/json" }, body: JSON.stringify(body || {}) });
      },
      session() { return this.json("/api/session"); },
      dashboard() { return this.json("/api/dashboard"); },
      stopDashboard() { return fetch("/api/dashboard/stop", { method: "POST", keepalive: true }); },
      // Mutations carry the current search and filters so the response is the list as shown.
      view(resource, extra = {}) {
        const params = new URLSearchParams(extra);
        if (state.search[resource]) params.set("q", state.search[resource]);
        Object.entries(state.filters[resource] || {}).forEach(([k, v]) => { if (v) params.set(k, v); });
        return params.toString();
      },
      list(resource) { return this.json(`/api/${resource}?${this.view(resource)}`); },
      create(resource, formData) { return this.json(`/api/${resource}?${this.view(resource)}`, { method: "POST", body: formData }); },
      update(resource, id, formData) { return this.json(`/api/${resource}/${encodeURIComponent(id)}?${this.view(resource)}`, { method: "PUT", body: formData }); },
      remove(resource, id) { return this.json(`/api/${resource}/${encodeURIComponent(id)}?${this.view(resource, { confirm: "true" })}`, { method: "DELETE" }); },
      categories() { return this.json("/api/videos/categories"); },
      memberStatus(id, status, confirm) { return this.send(`/api/members/${encodeURIComponent(id)}/status?${this.view("members")}`, "PUT", { status, confirm }); },
      approve(id) { return this.send(`/api/receipts/${encodeURIComponent(id)}/approve`, "POST"); },
      reject(id) { return this.send(`/api/receipts/${encodeURIComponent(id)}/reject`, "POST"); },
      preview(resource, id, body) { return this.send(`/api/${resource}/${encodeURIComponent(id)}/preview`, "POST", body); },
      revokePreview(key) { return fetch(`/api/previews/${encodeURIComponent(key)}`, { method: "DELETE", keepalive: true }); },
      signedUrl(id) { return this.json(`/api/videos/${encodeURIComponent(id)}/signed-url`); },
      settings() { return this.json("/api/settings"); },
      saveSettings(body) { return this.send("/api/settings", "PUT", body); },
    };

    function esc(value) {
      return String(value === undefined || value === null ? "" : value)
        .replace(/&/g, "&amp;").replace(/</g, "&lt;").replace(/>/g, "&gt;").replace(/"/g, "&quot;");
    }
    function fmtDate(value) {
      if (!value) return "-";
      const d = typeof value === "number" ? new Date(value * 1000) : new Date(value);
      return isNaN(d.getTime()) ? "-" : d.toLocaleDateString();
    }
    function showToast(msg) {
      const el = document.getElementById("toast");
      el.textContent = msg;
      el.classList.add("show");
      setTimeout(() => el.classList.remove("show"), 3200);
    }
    function assetUrl(path, placeholder) {
      if (!path) return placeholder;
      return (state.session && state.session.assetBase ? state.session.assetBase : "") + path;
    }
    function statusPill(status) {
      const s = (status || "").toLowerCase();
      const cls = (s === "paid" || s === "approved") ? "success" : (s === "pending" ? "warn" : "danger");
      return `<span class="pill ${cls}">${esc(status)}</span>`;
    }

    // ---------- navigation ----------
    function currentView() { return (window.location.hash || "#dashboard").slice(1); }

    function showView() {
      const view = currentView();
      document.querySelectorAll(".view").forEach(el => el.classList.toggle("active", el.id === `view-${view}`));
      document.querySelectorAll("#nav a").forEach(a => a.classList.toggle("active", a.getAttribute("href") === `#${view}`));
      if (view === "dashboard") {
        startDashboard();
      } else {
        stopDashboard();
      }
      if (view === "settings") loadSettings();
      else if (view !== "dashboard") loadList(view);
    }

    // ---------- dashboard ----------
    async function loadDashboard() {
      try {
        const data = await api.dashboard();
        document.getElementById("poll-interval").textContent = data.interval_seconds;
        renderDashboard(data);
      } catch (e) {
        showToast("Failed to load dashboard: " + e.message);
      }
    }
    function startDashboard() {
      if (state.dashboardTimer) return;
      loadDashboard();
      state.dashboardTimer = setInterval(loadDashboard, 10000);
    }
    function stopDashboard() {
      if (!state.dashboardTimer) return;
      clearInterval(state.dashboardTimer);
      state.dashboardTimer = null;
      api.stopDashboard();
    }
    function renderDashboard(data) {
      const widgets = data.widgets || {};
      const stats = (widgets.stats && widgets.stats.data) || {};
      const labels = {
        activeMembers: "Active Members",
        totalVideos: "Total Videos",
        totalEbooks: "E-Books Published",
        totalCertificates: "Certificates",
        totalRevenue: "Revenue (€)",
        pendingReceipts: "Pending Transfers",
      };
      const cards = Object.entries(stats).filter(([k, v]) => typeof v !== "object");
      document.getElementById("stats-cards").innerHTML = cards.length
        ? cards.map(([k, v]) => `<div class="card"><h3>${esc(labels[k] || k)}</h3><div class="value">${esc(v)}</div></div>`).join("")
        : `<div class="card"><h3>Statistics</h3><div class="sub">${esc((widgets.stats && widgets.stats.error) || "No data yet.")}</div></div>`;
      renderRecent("recent-members", widgets.recentMembers, rec => `<td>${esc(rec.firstName)} ${esc(rec.lastName)}</td><td>${esc(rec.email)}</td><td class="muted">${fmtDate(rec.createdAt)}</td>`);
      renderRecent("recent-purchases", widgets.recentPurchases, rec => `<td>${esc(rec.itemName)}</td><td>€${Number(rec.amount || 0).toFixed(2)}</td><td class="muted">${fmtDate(rec.date)}</td>`);
      document.getElementById("activity").innerHTML = (data.events || []).map(evt => `
        <div class="card"><h3>${esc(evt.title)}</h3><div class="sub">${esc(evt.detail)}</div><div class="muted">${fmtDate(evt.ts)}</div></div>
      `).join("") || "<div class='muted'>No activity yet.</div>";
    }
    function renderRecent(tableId, widget, row) {
      const tbody = document.querySelector(`#${tableId} tbody`);
      const data = (widget && widget.data) || {};
      const rows = Object.values(data).find(v => Array.isArray(v)) || [];
      if (!rows.length) {
        tbody.innerHTML = `<tr><td class="muted">${esc((widget && widget.error) || "Nothing recent.")}</td></tr>`;
        return;
      }
      tbody.innerHTML = rows.map(rec => `<tr>${row(rec)}</tr>`).join("");
    }

    // ---------- lists ----------
    function showListing(resource, data) {
      state.views[resource] = data;
      state.items[resource] = data.items || [];
      renderList(resource, data);
    }

    async function loadList(resource) {
      try {
        showListing(resource, await api.list(resource));
      } catch (e) {
        showToast(`Failed to load ${resource}: ${e.message}`);
      }
    }

    function fillSelect(id, values, allLabel) {
      const el = document.getElementById(id);
      const current = el.value;
      el.innerHTML = `<option value="">${allLabel}</option>` + values.map(v => `<option value="${esc(v.value)}">${esc(v.label)}</option>`).join("");
      el.value = current;
    }

    function renderList(resource, data) {
      const items = state.items[resource];
      const container = document.getElementById(`list-${resource}`);
      if (resource === "videos") {
        container.innerHTML = items.map(v => `
          <div class="card">
            <img src="${esc(assetUrl(v.thumbnailUrl, "https://placehold.co/320x240?text=No+Thumbnail"))}" alt="${esc(v.title)}" />
            <h3>${esc(v.title)}</h3>
            <div class="sub"><span class="pill">${esc(v.visibility)}</span> Level: ${esc(v.level)} · ${esc((v.category && v.category.name) || "No Category")}</div>
            <div class="actions" style="margin-top:10px;">
              <button class="ghost" onclick="playVideo('${esc(v._id)}', '${esc(v.title)}')">Play</button>
              <button class="ghost" onclick="openForm('videos', '${esc(v._id)}')">Edit</button>
              <button class="ghost" onclick="confirmDelete('videos', '${esc(v._id)}')">Delete</button>
            </div>
          </div>`).join("") || "<div class='muted'>No videos found.</div>";
      } else if (resource === "ebooks") {
        container.innerHTML = items.map(b => `
          <div class="card">
            <img src="${esc(assetUrl(b.coverUrl, "https://placehold.co/300x400?text=No+Cover"))}" alt="${esc(b.title)}" />
            <h3>${esc(b.title)}</h3>
            <div class="sub"><span class="pill">${esc(b.visibility)}</span> <span class="pill">${esc(b.pricing)}</span> ${b.isFree ? "" : "€" + esc(b.price)}</div>
            <div class="actions" style="margin-top:10px;">
              <button class="ghost" onclick="openPreview('ebooks', '${esc(b._id)}', '${esc(b.title)}', '${esc(b.mimeType)}')">Preview</button>
              <button class="ghost" onclick="openForm('ebooks', '${esc(b._id)}')">Edit</button>
              <button class="ghost" onclick="confirmDelete('ebooks', '${esc(b._id)}')">Delete</button>
            </div>
          </div>`).join("") || "<div class='muted'>No e-books found.</div>";
      } else if (resource === "certificates") {
        container.innerHTML = items.map(c => `
          <div class="card">
            <img src="${esc(assetUrl(c.thumbUrl, "https://placehold.co/300x400?text=No+Thumbnail"))}" alt="${esc(c.name)}" />
            <h3>${esc(c.name)}</h3>
            <div class="sub">${esc(c.description)}</div>
            <div class="actions" style="margin-top:10px;">
              <button class="ghost" onclick="openPreview('certificates', '${esc(c._id)}', '${esc(c.name)}', 'application/pdf')">Preview</button>
              <button class="ghost" onclick="openForm('certificates', '${esc(c._id)}')">Edit</button>
              <button class="ghost" onclick="confirmDelete('certificates', '${esc(c._id)}')">Delete</button>
            </div>
          </div>`).join("") || "<div class='muted'>No certificates found.</div>";
      } else if (resource === "members") {
        fillSelect("member-plan-filter", (data.plans || []).map(p => ({ value: p, label: p })), "All plans");
        const options = ["paid", "pending", "failed", "cancelled", "inactive"];
        container.innerHTML = items.map(m => `
          <tr>
            <td>${esc(m.firstName)} ${esc(m.lastName)}</td>
            <td>${esc(m.email)}</td>
            <td>${esc(m.planName || "-")}</td>
            <td>
              <select ${m.statusLocked ? "disabled" : ""} onchange="changeStatus('${esc(m._id)}', this)">
                ${options.map(o => `<option value="${o}" ${m.displayStatus.toLowerCase() === o ? "selected" : ""}>${o.charAt(0).toUpperCase() + o.slice(1)}</option>`).join("")}
              </select>
            </td>
            <td class="muted">${fmtDate(m.createdAt)}</td>
          </tr>`).join("") || "<tr><td colspan='5'>No members found.</td></tr>";
      } else if (resource === "plans") {
        container.innerHTML = items.map(p => `
          <div class="card">
            <h3>${esc(p.name || p.nickname || p.id)}</h3>
            <div class="value">${p.amount !== undefined ? esc(p.amount) + " " + esc((p.currency || "").toUpperCase()) : "-"}</div>
            <div class="sub">${esc(p.interval || "")} · ${esc(p.priceId || p.id || "")}</div>
          </div>`).join("") || "<div class='muted'>No plans found.</div>";
      } else if (resource === "purchases") {
        fillSelect("purchase-type-filter", (data.itemTypes || []).map(t => ({ value: t, label: t })), "All types");
        container.innerHTML = items.map(p => `
          <tr>
            <td>${p.user ? esc(p.customer) : "<span class='muted'>Deleted User</span>"}</td>
            <td>${p.user ? esc(p.user.email) : "-"}</td>
            <td>${esc(p.itemName)}</td>
            <td>${esc(p.itemType)}</td>
            <td>€${Number(p.amount || 0).toFixed(2)}</td>
            <td class="muted">${fmtDate(p.date)}</td>
            <td class="muted">${esc(p.stripePaymentId || "-")}</td>
          </tr>`).join("") || "<tr><td colspan='7'>No transactions found.</td></tr>";
      } else if (resource === "receipts") {
        renderReceipts(items);
      }
    }

    function renderReceipts(items) {
      document.getElementById("list-receipts").innerHTML = items.map(r => `
        <tr>
          <td>${r.user ? esc(r.user.firstName) + " " + esc(r.user.lastName) : "-"}</td>
          <td>${r.user ? esc(r.user.email) : "-"}</td>
          <td>${esc(r.priceId)}</td>
          <td>${r.receipt ? `<a href="${esc(assetUrl(r.receipt, ""))}" target="_blank">View</a>` : "-"}</td>
          <td>${statusPill(r.status)}</td>
          <td class="muted">${fmtDate(r.createdAt)}</td>
          <td>
            <select ${r.status !== "pending" ? "disabled" : ""} onchange="reviewReceipt('${esc(r._id)}', this.value)">
              <option value="">Select</option>
              <option value="approve">Approve</option>
              <option value="reject">Reject</option>
            </select>
          </td>
        </tr>`).join("") || "<tr><td colspan='7'>No receipts found.</td></tr>";
    }

    // ---------- forms ----------
    function openForm(resource, id) {
      const spec = FORMS[resource];
      const item = id ? (state.items[resource] || []).find(i => i._id === id) : null;
      state.editing = { resource, id: id || null };
      document.getElementById("form-title").textContent = `${item ? "Edit" : "Upload"} ${spec.label}`;
      const form = document.getElementById("resource-form");
      form.innerHTML = spec.fields.map(f => {
        const value = item ? (f.name === "category" ? (item.category && item.category._id) : item[f.name]) : "";
        const required = f.required || (f.requiredOnCreate && !item) ? "required" : "";
        if (f.type === "textarea") return `<label>${f.label}<textarea name="${f.name}" rows="3">${esc(value)}</textarea></label>`;
        if (f.type === "checkbox") return `<label class="inline"><input type="checkbox" name="${f.name}" ${value ? "checked" : ""} /> ${f.label}</label>`;
        if (f.type === "file") return `<label>${f.label}${required ? " *" : ""}<input type="file" name="${f.name}" accept="${f.accept}" ${required} /></label>`;
        if (f.type === "category") return `<label>${f.label}<select name="category"><option value="">No category</option>${state.categories.map(c => `<option value="${esc(c._id)}" ${c._id === value ? "selected" : ""}>${esc(c.name)}</option>`).join("")}</select></label>`;
        const type = f.type === "number" ? "number min='0' step='0.01'" : "text";
        return `<label>${f.label}<input type=${type} name="${f.name}" value="${esc(value)}" ${required} /></label>`;
      }).join("") + `
        <div class="error" id="form-error"></div>
        <div class="actions">
          <button type="submit" id="form-submit">${item ? "Save Changes" : "Upload"}</button>
          <button type="button" class="ghost" onclick="closeForm()">Cancel</button>
        </div>`;
      const isFree = form.querySelector("input[name=isFree]");
      if (isFree) {
        const price = form.querySelector("input[name=price]");
        const sync = () => { price.disabled = isFree.checked; if (isFree.checked) price.value = "0"; };
        isFree.addEventListener("change", sync);
        sync();
      }
      document.getElementById("form-modal").classList.add("show");
    }
    function closeForm() {
      state.editing = null;
      document.getElementById("form-modal").classList.remove("show");
    }
    document.getElementById("resource-form").addEventListener("submit", async (e) => {
      e.preventDefault();
      const { resource, id } = state.editing;
      const form = e.target;
      const data = new FormData();
      FORMS[resource].fields.forEach(f => {
        const el = form.querySelector(`[name=${f.name}]`);
        if (!el) return;
        if (f.type === "checkbox") data.append(f.name, el.checked ? "true" : "false");
        else if (f.type === "file") { if (el.files && el.files[0]) data.append(f.name, el.files[0]); }
        else data.append(f.name, el.disabled ? "0" : el.value);
      });
      const btn = document.getElementById("form-submit");
      btn.disabled = true;
      try {
        const res = id ? await api.update(resource, id, data) : await api.create(resource, data);
        closeForm();
        showToast(`${FORMS[resource].label} saved`);
        showListing(resource, res);
      } catch (err) {
        document.getElementById("form-error").textContent = err.message;
      }
      btn.disabled = false;
    });

    // ---------- confirm ----------
    function askConfirm(title, text, yesLabel, action) {
      state.confirmAction = action;
      document.getElementById("confirm-title").textContent = title;
      document.getElementById("confirm-text").textContent = text;
      document.getElementById("confirm-yes").textContent = yesLabel;
      document.getElementById("confirm-modal").classList.add("show");
    }
    function closeConfirm() {
      state.confirmAction = null;
      document.getElementById("confirm-modal").classList.remove("show");
    }
    document.getElementById("confirm-yes").addEventListener("click", async () => {
      const action = state.confirmAction;
      closeConfirm();
      if (action) await action();
    });
    function confirmDelete(resource, id) {
      const label = FORMS[resource].label;
      askConfirm(`Delete ${label}`, `Are you sure you want to delete this ${label.toLowerCase()}? This action cannot be undone.`, "Yes, Delete", async () => {
        try {
          showListing(resource, await api.remove(resource, id));
          showToast(`${label} deleted`);
        } catch (e) {
          showToast("Delete failed: " + e.message);
        }
      });
    }

    // ---------- members & receipts ----------
    async function changeStatus(id, select) {
      const status = select.value;
      const apply = async (confirm) => {
        try {
          showListing("members", await api.memberStatus(id, status, confirm));
          showToast("Member status updated");
        } catch (e) {
          showToast("Status update failed: " + e.message);
          await loadList("members");
        }
      };
      if (status === "inactive") {
        askConfirm("Deactivate member", "Setting a member to inactive ends their membership. Continue?", "Yes, Deactivate", () => apply(true));
        // Put the select back until the admin confirms.
        if (state.views.members) renderList("members", state.views.members);
        return;
      }
      await apply(false);
    }
    async function reviewReceipt(id, action) {
      if (!action) return;
      try {
        const data = action === "approve" ? await api.approve(id) : await api.reject(id);
        state.items.receipts = (state.items.receipts || []).map(r => r._id === id ? { ...r, status: data.receipt.status } : r);
        renderReceipts(state.items.receipts);
        showToast(`Receipt ${data.receipt.status}`);
      } catch (e) {
        showToast("Review failed: " + e.message);
      }
    }

    // ---------- previews ----------
    async function openPreview(resource, id, title, mimeType) {
      document.getElementById("preview-title").textContent = title;
      document.getElementById("preview-body").innerHTML = "Loading...";
      document.getElementById("preview-modal").classList.add("show");
      try {
        const data = await api.preview(resource, id, { title, mimeType });
        state.preview = data.key;
        document.getElementById("preview-body").innerHTML = data.kind === "pdf"
          ? `<iframe src="${esc(data.url)}" title="Preview" width="100%" height="600px"></iframe>`
          : `<img src="${esc(data.url)}" alt="${esc(title)}" style="max-height:60vh;width:100%;object-fit:contain;background:#000;" />`;
      } catch (e) {
        document.getElementById("preview-body").textContent = "Preview not available: " + e.message;
      }
    }
    async function playVideo(id, title) {
      document.getElementById("preview-title").textContent = title;
      document.getElementById("preview-body").innerHTML = "Loading...";
      document.getElementById("preview-modal").classList.add("show");
      try {
        const data = await api.signedUrl(id);
        document.getElementById("preview-body").innerHTML = `<video src="${esc(data.signedUrl)}" controls autoplay style="max-height:60vh;width:100%;background:#000;"></video>`;
      } catch (e) {
        document.getElementById("preview-body").textContent = e.message || "Failed to load video.";
      }
    }
    function closePreview() {
      document.getElementById("preview-modal").classList.remove("show");
      document.getElementById("preview-body").innerHTML = "";
      if (state.preview) {
        api.revokePreview(state.preview);
        state.preview = null;
      }
    }

    // ---------- settings ----------
    async function loadSettings() {
      try {
        const data = await api.settings();
        const form = document.getElementById("settings-form");
        ["firstName", "lastName", "email"].forEach(k => { form.elements[k].value = data.profile[k] || ""; });
      } catch (e) {
        showToast("Failed to load profile: " + e.message);
      }
    }
    document.getElementById("settings-form").addEventListener("submit", async (e) => {
      e.preventDefault();
      const form = e.target;
      const body = {};
      ["firstName", "lastName", "email", "currentPassword", "newPassword", "confirmPassword"].forEach(k => { body[k] = form.elements[k].value; });
      document.getElementById("settings-error").textContent = "";
      if ((body.currentPassword || body.newPassword || body.confirmPassword) && body.newPassword !== body.confirmPassword) {
        document.getElementById("settings-error").textContent = "Passwords do not match!";
        return;
      }
      try {
        const res = await api.saveSettings(body);
        ["currentPassword", "newPassword", "confirmPassword"].forEach(k => { form.elements[k].value = ""; });
        showToast(res.password_changed ? "Password and profile updated" : "Profile updated successfully!");
        document.getElementById("admin-name").textContent = res.profile.name || res.profile.email || "Signed in";
      } catch (err) {
        document.getElementById("settings-error").textContent = err.message;
      }
    });

    // ---------- wiring ----------
    document.querySelectorAll("[data-search]").forEach(el => {
      el.addEventListener("input", () => {
        state.search[el.dataset.search] = el.value;
        loadList(el.dataset.search);
      });
    });
    document.querySelectorAll("[data-filter]").forEach(el => {
      el.addEventListener("change", () => {
        const resource = el.dataset.filter;
        state.filters[resource] = { ...(state.filters[resource] || {}), [el.dataset.name]: el.value };
        loadList(resource);
      });
    });
    window.addEventListener("hashchange", showView);
    window.addEventListener("pagehide", () => {
      stopDashboard();
      if (state.preview) api.revokePreview(state.preview);
    });

    (async () => {
      try {
        state.session = await api.session();
        const admin = state.session.admin || {};
        document.getElementById("admin-name").textContent = admin.name || admin.username || admin.email || "Signed in";
        const cats = await api.categories();
        state.categories = cats.categories || [];
        fillSelect("video-category-filter", state.categories.map(c => ({ value: c._id, label: c.name })), "All categories");
      } catch (e) {
        showToast(e.message);
      }
      showView();
    })();
  </script>
</body>
</html>
"""
