import os
import shutil
import logging
import time
from collections import deque
from datetime import datetime

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, TemplateSyntaxError

from .assets import AssetLocalizer, ImageCache
from .client import format_display_date
from .converter import DocumentConverter
from .links import internal_href, PAGE_PREFIX
from .models import OutputPage
from .slugs import SlugRegistry, reserve
from .url_validator import SafeRequestor

PACKAGE_TEMPLATES = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'templates')
PAGE_TEMPLATE = 'page.html'


class Frontier:
    """FIFO queue of (document_id, slug_hint) in which an id is enqueued at most once."""

    def __init__(self):
        self._queue = deque()
        self._seen = set()

    def __len__(self):
        return len(self._queue)

    def __bool__(self):
        return bool(self._queue)

    def __contains__(self, document_id):
        return document_id in self._seen

    def try_enqueue(self, document_id, slug_hint=None):
        """Enqueue document_id unless it has ever been enqueued; returns True if added."""
        if document_id in self._seen:
            return False
        self._seen.add(document_id)
        self._queue.append((document_id, slug_hint))
        return True

    def pop(self):
        return self._queue.popleft()


class InfoFilter(logging.Filter):
    """Filter to allow only selected INFO messages to be shown in the console."""
    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        allowed_messages = [
            "Starting site build",
            "Site build completed in",
            "Total documents visited:",
            "Total pages generated:",
            "Total images localized:",
            "Copied static assets",
            "Generating:",
            "Wrote:",
        ]
        return any(msg in record.getMessage() for msg in allowed_messages)


class Docsgen:
    def __init__(self, client, root_doc_id, output_dir='dist', static_dir='static', templates_dir=None,
                 doc_hosts=None, log_dir='logs', site_title=None, requestor=None):
        if not root_doc_id:
            raise ValueError("A root document id is required")
        self.client = client
        self.root_doc_id = root_doc_id
        self.output_dir = output_dir
        self.static_dir = static_dir
        self.templates_dir = templates_dir or PACKAGE_TEMPLATES
        self.log_dir = log_dir
        self.site_title = site_title

        self.documents_visited = 0
        self.pages_generated = 0
        self.pages = []

        # Run state, owned by this instance for the duration of a build
        self.registry = SlugRegistry()
        self.frontier = Frontier()
        self.image_cache = ImageCache()

        self.setup_logging()

        self.images_dir = os.path.join(self.output_dir, 'static', 'images')
        self.converter = DocumentConverter(doc_hosts)
        self.localizer = AssetLocalizer(self.images_dir, requestor=requestor or SafeRequestor(),
                                        cache=self.image_cache)

        if not os.path.isdir(self.templates_dir):
            self.logger.warning(f"Templates directory {self.templates_dir} not found, using package templates")
            self.templates_dir = PACKAGE_TEMPLATES
        self.env = Environment(loader=FileSystemLoader(self.templates_dir))

    def setup_logging(self):
        """Set up logging configuration.

        Component loggers (docsgen.converter, docsgen.assets, docsgen.client)
        propagate to the docsgen logger and share its handlers.
        """
        self.logger = logging.getLogger('docsgen')
        self.logger.setLevel(logging.DEBUG)
        self.log_file = None

        console_handlers = [h for h in self.logger.handlers
                            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)]
        if not console_handlers:
            # Console handler with filter
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.addFilter(InfoFilter())
            console_handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(console_handler)

        # File handler for all logs, one per log directory
        if self.log_dir:
            os.makedirs(self.log_dir, exist_ok=True)
            log_dir = os.path.abspath(self.log_dir)
            for handler in self.logger.handlers:
                if isinstance(handler, logging.FileHandler) and os.path.dirname(handler.baseFilename) == log_dir:
                    self.log_file = handler.baseFilename
                    return
            log_filename = datetime.now().strftime('docsgen_%Y-%m-%d_%H-%M-%S.log')
            file_handler = logging.FileHandler(os.path.join(log_dir, log_filename))
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
            self.logger.addHandler(file_handler)
            self.log_file = file_handler.baseFilename

    def prepare_output_dir(self):
        """Create the output directory, removing only what a previous build generated."""
        if not os.path.exists(self.output_dir):
            os.makedirs(self.output_dir, exist_ok=True)
            return

        generated = [
            os.path.join(self.output_dir, 'index.html'),
            os.path.join(self.output_dir, PAGE_PREFIX),
            self.images_dir,
        ]
        for item_path in generated:
            if os.path.isdir(item_path):
                shutil.rmtree(item_path)
            elif os.path.exists(item_path):
                os.remove(item_path)

    def copy_static_to_output(self):
        """Copy the static directory to <output>/static."""
        if not self.static_dir or not os.path.isdir(self.static_dir):
            self.logger.debug(f"No static directory at {self.static_dir}, skipping copy")
            return
        try:
            shutil.copytree(self.static_dir, os.path.join(self.output_dir, 'static'), dirs_exist_ok=True)
            self.logger.info(f"Copied static assets from {self.static_dir}")
        except (IOError, OSError, PermissionError) as e:
            self.logger.error(f"Failed to copy static assets from {self.static_dir}: {e}")

    def link_href(self, document_id, suggested_slug):
        """Href for a link to document_id; reserves the target's slug on first sight."""
        if document_id == self.root_doc_id:
            return '/'
        return internal_href(reserve(self.registry, document_id, suggested_slug))

    def output_path_for(self, document_id):
        """Return (path, slug) for a document; the root has no slug."""
        if document_id == self.root_doc_id:
            return os.path.join(self.output_dir, 'index.html'), None
        slug = reserve(self.registry, document_id, document_id)
        return os.path.join(self.output_dir, PAGE_PREFIX, slug, 'index.html'), slug

    def build_nav(self, document_id):
        """Navigation markup: none for the root, back link plus creation date elsewhere."""
        if document_id == self.root_doc_id:
            return ''
        created = self.client.fetch_created_time(document_id)
        created_span = f'<span class="created">Created: {created}</span>' if created else ''
        return f'<nav class="top"><a href="/" class="back" aria-label="Back to home">&larr; back</a>{created_span}</nav>'

    def render_page(self, content_html, nav_html='', title=None, is_root=False):
        """Render a page with the Jinja2 page template."""
        try:
            template = self.env.get_template(PAGE_TEMPLATE)
        except (TemplateNotFound, TemplateSyntaxError) as e:
            self.logger.error(f"Template error: {e}")
            raise
        return template.render(
            content=content_html,
            nav=nav_html,
            title=title,
            site_title=self.site_title,
            is_root=is_root,
            last_updated=format_display_date(datetime.now()),
        )

    def write_page(self, output_path, page):
        """Write a rendered page; a failed write aborts the build."""
        try:
            os.makedirs(os.path.dirname(output_path), exist_ok=True)
            with open(output_path, 'w', encoding='utf-8') as output_file:
                output_file.write(page)
        except (IOError, OSError, PermissionError) as e:
            self.logger.error(f"Failed to write page {output_path}: {e}")
            raise

    def process_document(self, document_id, slug_hint):
        """Fetch, convert, localize and write one document; returns (OutputPage, links)."""
        self.logger.info(f"Generating: {document_id} (slug hint: {slug_hint})")
        document = self.client.fetch_document(document_id)
        self.documents_visited += 1

        result = self.converter.convert(document, link_href=self.link_href)
        markdown_text = self.localizer.localize(result.markdown)
        content_html = self.converter.render_html(markdown_text)

        is_root = document_id == self.root_doc_id
        page = self.render_page(content_html, self.build_nav(document_id), title=result.title, is_root=is_root)

        output_path, slug = self.output_path_for(document_id)
        self.write_page(output_path, page)
        self.pages_generated += 1
        self.logger.info(f"Wrote: {output_path}")
        return OutputPage(document_id, output_path, slug), result.links

    def crawl(self):
        """Breadth-first crawl from the root document, writing one page per document."""
        self.frontier.try_enqueue(self.root_doc_id, None)

        while self.frontier:
            document_id, slug_hint = self.frontier.pop()
            output_page, links = self.process_document(document_id, slug_hint)
            self.pages.append(output_page)

            for link in links:
                self.logger.debug(f"  found link -> id={link.document_id} slug={link.suggested_slug}")
                if link.document_id == self.root_doc_id:
                    continue
                slug = reserve(self.registry, link.document_id, link.suggested_slug)
                self.frontier.try_enqueue(link.document_id, slug)

        return self.pages

    def build(self):
        """Main build process."""
        start_time = time.time()
        self.logger.info("Starting site build...")

        self.prepare_output_dir()
        self.copy_static_to_output()
        pages = self.crawl()

        total_time = time.time() - start_time
        self.logger.info(f"Site build completed in {total_time:.6f} seconds.")
        self.logger.info(f"Total documents visited: {self.documents_visited}")
        self.logger.info(f"Total pages generated: {self.pages_generated}")
        self.logger.info(
            f"Total images localized: {self.localizer.images_written} written, "
            f"{self.localizer.images_reused} reused"
        )
        return pages
