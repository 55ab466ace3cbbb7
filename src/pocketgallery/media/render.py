"""Gallery renderer: directory listing → HTML.

Media elements never get an active ``src`` in the markup. The real URL sits
in ``data-src`` (and ``data-poster`` for video thumbnails) and the page
script copies it over once the element has stayed in the viewport for
``LAZY_SETTLE_MS``. Nothing is fetched for media the user never scrolls to,
including ffmpeg thumbnails.

Created: 2026-10-12
"""

from __future__ import annotations

import html
from collections.abc import Callable, Iterable
from urllib.parse import quote

from pocketgallery.media.models import EntryKind, FileEntry

THUMBNAIL_PARAM = "poster"
LAZY_SETTLE_MS = 200


def _text(name: str) -> str:
    # Undecodable filename bytes come back from listdir as surrogates.
    return html.escape(name.encode("utf-8", "surrogateescape").decode("utf-8", "replace"))


def _href(name: str, trailing_slash: bool = False) -> str:
    url = "./" + quote(name, safe="", errors="surrogateescape")
    if trailing_slash:
        url += "/"
    return html.escape(url)


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    if size < 1024 * 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    return f"{size / (1024 * 1024 * 1024):.1f} GB"


def _render_directory(entry: FileEntry) -> str:
    return (
        '<div class="entry dir">'
        f'<a href="{_href(entry.name, trailing_slash=True)}">{_text(entry.name)}/</a>'
        f"<span>{entry.display_time}</span>"
        "</div>"
    )


def _render_link(entry: FileEntry) -> str:
    return (
        '<div class="entry file">'
        f'<a href="{_href(entry.name)}">{_text(entry.name)}</a>'
        f"<span>{entry.display_time}</span>"
        f"<span>{format_size(entry.size)}</span>"
        "</div>"
    )


def _figure(element: str, entry: FileEntry) -> str:
    return (
        '<figure class="entry media">'
        f"{element}"
        f'<figcaption><a href="{_href(entry.name)}">{_text(entry.name)}</a> '
        f"<span>{format_size(entry.size)}</span></figcaption>"
        "</figure>"
    )


def _render_video(entry: FileEntry) -> str:
    src = _href(entry.name)
    return _figure(
        f'<video data-src="{src}" data-poster="{src}?{THUMBNAIL_PARAM}=1" '
        'controls preload="none"></video>',
        entry,
    )


def _render_audio(entry: FileEntry) -> str:
    return _figure(
        f'<audio data-src="{_href(entry.name)}" controls preload="none"></audio>',
        entry,
    )


def _render_image(entry: FileEntry) -> str:
    return _figure(
        f'<img data-src="{_href(entry.name)}" alt="{_text(entry.name)}">',
        entry,
    )


_RENDERERS: dict[EntryKind, Callable[[FileEntry], str]] = {
    EntryKind.DIRECTORY: _render_directory,
    EntryKind.VIDEO: _render_video,
    EntryKind.AUDIO: _render_audio,
    EntryKind.IMAGE: _render_image,
    EntryKind.FILE: _render_link,
    EntryKind.OTHER: _render_link,
}


def render_entry(entry: FileEntry) -> str:
    return _RENDERERS[entry.kind](entry)


def render_gallery(entries: Iterable[FileEntry]) -> str:
    """Render entries as an HTML fragment, one block per entry, order kept."""
    return "\n".join(render_entry(entry) for entry in entries)


_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <meta name="color-scheme" content="light dark">
  <title>{title}</title>
{base}  <style>
    body {{ display: flex; flex-direction: column; gap: 8px; font-family: sans-serif; }}
    .entry span {{ margin-left: 1em; opacity: 0.6; font-size: 0.9em; }}
    figure {{ margin: 0; }}
    video, img {{ max-width: 100%; }}
    video {{ width: 100%; }}
  </style>
</head>
<body>
  <a href="../">../</a>
{gallery}
  <script>
    (function () {{
      const SETTLE_MS = {settle_ms};
      const pending = new Map();
      function activate(el) {{
        if (el.getAttribute('src')) return;
        if (el.dataset.poster) el.setAttribute('poster', el.dataset.poster);
        el.setAttribute('src', el.dataset.src);
      }}
      const observer = new IntersectionObserver((entries) => {{
        entries.forEach((entry) => {{
          const el = entry.target;
          if (entry.isIntersecting) {{
            pending.set(el, setTimeout(() => {{
              pending.delete(el);
              activate(el);
              observer.unobserve(el);
            }}, SETTLE_MS));
          }} else if (pending.has(el)) {{
            clearTimeout(pending.get(el));
            pending.delete(el);
          }}
        }});
      }});
      document.querySelectorAll('video[data-src], audio[data-src], img[data-src]')
        .forEach((el) => observer.observe(el));
    }})();
  </script>
</body>
</html>
"""


def render_page(
    title: str, entries: Iterable[FileEntry], base_href: str | None = None
) -> str:
    """Render the full gallery document for one directory.

    *base_href* pins relative links to the directory URL, so the page also
    works when it was requested without a trailing slash.
    """
    base = f'  <base href="{html.escape(base_href)}">\n' if base_href else ""
    return _PAGE.format(
        title=_text(title),
        base=base,
        gallery=render_gallery(entries),
        settle_ms=LAZY_SETTLE_MS,
    )
