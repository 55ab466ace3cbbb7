# PocketGallery HTTP layer
# Created: 2026-10-12
#
# serve.create_app() builds the FastAPI app; gallery.router holds the one
# catch-all route that answers every path under the configured root.
