"""Shared fixtures for VPS monitor tests"""

import pytest

DEFAULT_PAGE_FIELDS = {
    "VPS Creation Date": "November 20, 2025 09:15 WIB",
    "Valid until": "December 5, 2025 14:30",
    "IPv6": "2602:294:0:dc:1234:4321:5019:0001",
    "Location": "KL-DC1",
}


def render_vps_page(fields: dict[str, str | None]) -> str:
    """Render a VPS info page; a None value drops that row"""
    rows = "\n".join(
        f"<tr><th>{label}:</th><td>\n  {value}\n</td></tr>"
        for label, value in fields.items()
        if value is not None
    )
    return f"""
    <html>
      <head><title>VPS Info</title></head>
      <body>
        <h2>Your VPS</h2>
        <table class="table table-bordered">
          <tbody>
            {rows}
          </tbody>
        </table>
      </body>
    </html>
    """


@pytest.fixture
def vps_page():
    """Factory for VPS info pages with selected fields overridden"""

    def _build(overrides: dict[str, str | None] | None = None) -> str:
        fields = dict(DEFAULT_PAGE_FIELDS)
        fields.update(overrides or {})
        return render_vps_page(fields)

    return _build
