import asyncio
import json
import logging
import os
from datetime import datetime

from .destinations import list_page_destination, resolve_destination, url_from_destination
from .documents import is_eligible, parse_post_file
from .errors import ConfigurationError, InjectedDataParseError
from .markdown_renderer import MarkdownRenderer
from .pagination import build_page_groups, navigation_for
from .templates import TEMPLATE_ENGINES, TemplateContext, compile_template, get_engine, template_extension


class InfoFilter(logging.Filter):
    """Filter to allow only selected INFO messages, plus warnings and errors, on the console."""
    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        allowed_messages = [
            "Building target",
            "Site build completed in",
            "Total posts generated:",
            "Total pages generated:",
            "Total paginated pages generated:",
            "Created post at:",
            "Created page at:",
            "Created paginated page at:",
        ]
        return any(msg in record.getMessage() for msg in allowed_messages)


def read_text(path):
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


class Pagewright:
    """
    Build one task: posts, then optional pages, then optional paginated index.

    Every source post is parsed and rendered before anything is written.
    Post URLs are all assigned before the first post is rendered, so
    templates can link to any other post.
    """

    def __init__(self, task, markdown_renderer=None, log_dir=None, pretty=True):
        self.task = task
        self.markdown_renderer = markdown_renderer or MarkdownRenderer()
        self.log_dir = log_dir
        self.pretty = pretty
        self.posts = []
        self.written = []
        self.posts_generated = 0
        self.pages_generated = 0
        self.list_pages_generated = 0

        self.setup_logging()

    def setup_logging(self):
        """Set up logging configuration."""
        self.logger = logging.getLogger('Pagewright')
        self.logger.setLevel(logging.DEBUG)

        if not self.logger.handlers:
            # Console handler with filter
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.addFilter(InfoFilter())
            console_formatter = logging.Formatter('%(message)s')
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

            # File handler for all logs
            if self.log_dir:
                os.makedirs(self.log_dir, exist_ok=True)
                log_filename = datetime.now().strftime('pagewright_%Y-%m-%d_%H-%M-%S.log')
                log_filepath = os.path.join(self.log_dir, log_filename)

                file_handler = logging.FileHandler(log_filepath)
                file_handler.setLevel(logging.DEBUG)
                file_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
                file_handler.setFormatter(file_formatter)
                self.logger.addHandler(file_handler)

    def validate(self):
        """Catch configuration mistakes before any source is read."""
        get_engine(self.task.layout)
        pagination = self.task.pagination
        if pagination:
            get_engine(pagination.list_page)
            # Raises InvalidListPagePath when the list page sits outside page_src
            list_page_destination(self.task.dest, pagination.list_page, 0, self.task.page_src)
        if self.task.page_src and not os.path.isdir(self.task.page_src):
            raise ConfigurationError(f"Page source directory not found: {self.task.page_src}")

    def discover_sources(self):
        """All buildable files under the source directory, in a stable order."""
        if not os.path.isdir(self.task.src):
            raise ConfigurationError(f"Source directory not found: {self.task.src}")

        sources = []
        for root, dirs, files in os.walk(self.task.src):
            dirs.sort()
            for name in sorted(files):
                path = os.path.join(root, name)
                if is_eligible(path):
                    sources.append(path)
        return sources

    async def process_source(self, path):
        """Parse one source file and render its markdown body."""
        document = await asyncio.to_thread(parse_post_file, path)
        html = await self.markdown_renderer.render(document.markdown)
        document.attach_content(html)
        self.logger.debug(f"Rendered markdown for {path}")
        return document

    async def collect_documents(self, sources):
        """
        Process every source concurrently and return the documents in
        discovery order.

        The first failure cancels whatever is still in flight and is
        re-raised; no document from a failed batch is returned.
        """
        if not sources:
            return []

        tasks = [asyncio.ensure_future(self.process_source(path)) for path in sources]
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)

        failed = [task for task in tasks if task in done and task.exception() is not None]
        if failed:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            raise failed[0].exception()

        return [task.result() for task in tasks]

    async def load_data(self):
        """Parse the external JSON data file merged into every template."""
        if not self.task.data:
            return None
        try:
            text = await asyncio.to_thread(read_text, self.task.data)
            return json.loads(text)
        except (OSError, ValueError) as e:
            raise InjectedDataParseError(self.task.data, e) from e

    def write_file(self, path, text):
        """Write rendered output, creating parent directories as needed."""
        try:
            os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                f.write(text)
        except (IOError, OSError) as e:
            self.logger.error(f"Failed to write {path}: {e}")
            raise
        self.written.append(path)

    def generate_posts(self, context):
        """Sort posts newest first, assign every URL, then render each post."""
        self.posts.sort(key=lambda post: post.date, reverse=True)

        destinations = []
        for post in self.posts:
            destination = resolve_destination(self.task.url, post, self.task.dest)
            post.url = url_from_destination(self.task.dest, destination)
            destinations.append(destination)

        if not self.posts:
            self.logger.info("No posts found to generate")
            return

        render = compile_template(self.task.layout, pretty=self.pretty)
        for post, destination in zip(self.posts, destinations):
            self.write_file(destination, render(context.view(post=post)))
            self.posts_generated += 1
            self.logger.info(f"Created post at: {destination}")

    def generate_pages(self, context):
        """Render every page template under page_src except the paginated list page."""
        pagination = self.task.pagination
        list_page = os.path.abspath(pagination.list_page) if pagination else None
        engine_filter = self.task.template_engine.lower() if self.task.template_engine else None
        # Extensions without a registered engine are rendered like the layout
        layout_engine = get_engine(self.task.layout)

        for root, dirs, files in os.walk(self.task.page_src):
            dirs.sort()
            for name in sorted(files):
                if name.startswith('.'):
                    continue
                path = os.path.join(root, name)
                if os.path.abspath(path) == list_page:
                    continue
                if engine_filter and template_extension(path) != engine_filter:
                    continue

                engine = TEMPLATE_ENGINES.get(template_extension(path), layout_engine)
                render = compile_template(path, pretty=self.pretty, engine=engine)
                relative = os.path.relpath(path, self.task.page_src)
                destination = os.path.join(self.task.dest, os.path.splitext(relative)[0] + '.html')
                current_page = os.path.splitext(name)[0]
                self.write_file(destination, render(context.view(currentPage=current_page)))
                self.pages_generated += 1
                self.logger.info(f"Created page at: {destination}")

    def paginate(self):
        """Write one list page per group of posts, each with the full page navigation."""
        pagination = self.task.pagination
        groups = build_page_groups(
            self.posts, pagination.posts_per_page, self.task.dest,
            pagination.list_page, self.task.page_src
        )
        if not groups:
            self.logger.info("No posts found for paginated pages")
            return

        render = compile_template(pagination.list_page, pretty=self.pretty)
        for group in groups:
            html = render({
                'pages': navigation_for(groups, group.number),
                'posts': group.posts,
            })
            self.write_file(group.destination, html)
            self.list_pages_generated += 1
            self.logger.info(f"Created paginated page at: {group.destination}")

    async def build_async(self):
        self.validate()
        sources = self.discover_sources()
        self.logger.debug(f"Found {len(sources)} source posts in {self.task.src}")

        # Nothing below runs until every source has been parsed and rendered.
        self.posts = await self.collect_documents(sources)

        context = TemplateContext(self.posts, await self.load_data())
        self.generate_posts(context)
        if self.task.page_src:
            self.generate_pages(context)
        if self.task.pagination:
            self.paginate()
        return self.written

    def build(self):
        """Main build process. Returns the paths written."""
        try:
            return asyncio.run(self.build_async())
        except Exception as e:
            self.logger.error(f"Error: {e}")
            raise
