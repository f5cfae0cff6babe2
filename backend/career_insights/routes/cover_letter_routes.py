"""Cover letter page routes."""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(prefix="/cover-letter", tags=["cover-letter"])


NEW_COVER_LETTER_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Create Cover Letter</title>
</head>
<body>
  <div class="container">
    <div class="page-header">
      <a href="/cover-letter" class="back-link">&larr; Back to Cover Letters</a>
      <div class="page-title">
        <h1 class="gradient-title">Create Cover Letter</h1>
        <p class="text-muted">Generate a tailored cover letter for your job application</p>
      </div>
    </div>
    <div id="cover-letter-generator" data-widget="cover-letter-generator"></div>
  </div>
</body>
</html>
"""


@router.get("/new", response_class=HTMLResponse, summary="New cover letter page")
def new_cover_letter() -> HTMLResponse:
    """Return the page shell that hosts the cover letter generator widget."""
    return HTMLResponse(content=NEW_COVER_LETTER_PAGE)
