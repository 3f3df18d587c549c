"""Static documentation page."""
import html
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from fileshare.context import AppContext, get_context

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])

DOCS_PAGE = """<!DOCTYPE html>
<html>
<head>
  <title>File Upload API Documentation</title>
</head>
<body>
  <h1>File Upload API Documentation</h1>
  <p>Welcome to the File Upload API. Below you will find information on how to use the endpoints.</p>

  <h2>Upload a File</h2>
  <p>To upload a file, use the following endpoint:</p>
  <pre><code>POST /upload</code></pre>
  <p>Send a <code>multipart/form-data</code> request with the file included in the <code>file</code> field.</p>
  <p>Example using <code>curl</code>:</p>
  <pre><code>curl -F "file=@/path/to/your/file" {base_url}/upload</code></pre>
  <p>The response is the JSON record of the stored file, including its public <code>url</code>.</p>

  <h2>File Access</h2>
  <p>Files can be accessed directly using the URL provided in the response of the upload endpoint.</p>
  <p>Example URL:</p>
  <pre><code>{base_url}/files/your-file-id.ext</code></pre>
</body>
</html>
"""


def render_docs(base_url: str) -> str:
    return DOCS_PAGE.format(base_url=html.escape(base_url))


@router.get("/", response_class=HTMLResponse)
async def documentation(context: AppContext = Depends(get_context)):
    logger.info("Documentation page served")
    return render_docs(context.settings.public_base_url)
