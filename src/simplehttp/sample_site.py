"""
Sample website for `python -m simplehttp --setup`.

Writes a handful of files (HTML, CSS, JavaScript, JSON) so there is
something to look at, and something to point curl at, right after
installing.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Union


logger = logging.getLogger(__name__)


INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>SimpleHTTP Server</title>
    <link rel="stylesheet" href="/style.css">
</head>
<body>
    <div class="container">
        <h1>Welcome to SimpleHTTP Server!</h1>
        <p>Your Python web server is working.</p>

        <div class="features">
            <h2>Features:</h2>
            <ul>
                <li>HTTP/1.1 Support</li>
                <li>Static File Serving</li>
                <li>MIME Type Detection</li>
                <li>Path Traversal Protection</li>
                <li>Request Logging</li>
                <li>Server Statistics</li>
            </ul>
        </div>

        <nav>
            <h2>Test Pages:</h2>
            <ul>
                <li><a href="/test.html">Test Page</a></li>
                <li><a href="/api.json">JSON API</a></li>
            </ul>
        </nav>
    </div>
    <script src="/app.js"></script>
</body>
</html>
"""

TEST_HTML = """<!DOCTYPE html>
<html>
<head>
    <title>Test Page</title>
    <link rel="stylesheet" href="/style.css">
</head>
<body>
    <div class="container">
        <h1>Test Page</h1>
        <p>This is a test page to verify the server is working correctly.</p>
        <a href="/">&larr; Back to Home</a>
    </div>
</body>
</html>
"""

STYLE_CSS = """body {
    font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif;
    line-height: 1.6;
    margin: 0;
    padding: 20px;
    background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
    min-height: 100vh;
    color: #333;
}

.container {
    max-width: 800px;
    margin: 0 auto;
    background: white;
    padding: 2rem;
    border-radius: 10px;
    box-shadow: 0 4px 6px rgba(0,0,0,0.1);
}

h1, h2 {
    color: #2c3e50;
}

h1 {
    text-align: center;
    margin-bottom: 1.5rem;
}

.features ul, nav ul {
    list-style-type: none;
    padding: 0;
}

.features li, nav li {
    padding: 0.5rem 0;
    border-bottom: 1px solid #eee;
}

a {
    color: #3498db;
    text-decoration: none;
}

a:hover {
    text-decoration: underline;
}
"""

APP_JS = """console.log('SimpleHTTP Server is running!');

document.addEventListener('DOMContentLoaded', function() {
    const title = document.querySelector('h1');
    if (title) {
        title.addEventListener('click', function() {
            title.style.color = title.style.color === 'red' ? '#2c3e50' : 'red';
        });
    }
});
"""


def _api_json(server_name: str) -> str:
    payload = {
        "server": server_name,
        "status": "running",
        "message": "API endpoint is working!",
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "endpoints": ["/", "/test.html", "/api.json"],
    }
    return json.dumps(payload, indent=4) + "\n"


def sample_files(server_name: str = "SimpleHTTP/1.0") -> Dict[str, str]:
    """File name → content for every file in the sample site."""
    return {
        "index.html": INDEX_HTML,
        "test.html": TEST_HTML,
        "style.css": STYLE_CSS,
        "app.js": APP_JS,
        "api.json": _api_json(server_name),
    }


def create_sample_site(root: Union[str, Path], server_name: str = "SimpleHTTP/1.0") -> List[Path]:
    """
    Write the sample website into `root`.

    The directory is created if needed. A file that cannot be written is
    logged and skipped; the others are still written.

    Args:
        root: Target directory (the server's document root).
        server_name: Reported by api.json.

    Returns:
        Paths of the files actually written.

    Raises:
        OSError: If the directory itself cannot be created.
    """
    root = Path(root)
    try:
        root.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Error creating document root {root}: {e}")
        raise

    written = []
    for filename, content in sample_files(server_name).items():
        path = root / filename
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.error(f"Error creating {filename}: {e}")
            continue
        logger.info(f"Created: {path}")
        written.append(path)

    return written
