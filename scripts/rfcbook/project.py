"""
Project subcommands: scaffolding and delegation to mdbook and cargo.

Project holds the book root and runs each subcommand there. External
tools are treated as black boxes: only their exit status is observed,
nothing is retried or rolled back.
"""

import os
import shutil
import subprocess

from rfcbook.config import Config, RfcBookConfig
from rfcbook.errors import DelegatedProcessError, FilesystemError
from rfcbook.summary import SUMMARY_FILE, gather_pages, render_summary


DEFAULT_TEMPLATE = "page"


def find_tool(name):
    """
    Executable for an external tool. Checks in order:
        1. MDBOOK_RFC_<NAME> environment variable
        2. the bare name, resolved on PATH by the OS
    """
    override = os.environ.get(f"MDBOOK_RFC_{name.upper()}")
    if override:
        return override
    return name


class Project:
    """
    An mdbook project on disk.

    Usage:
        project = Project("/path/to/book", verbose=True)
        project.install()
        project.build()
    """

    def __init__(self, folder, verbose=False):
        self.folder = os.path.abspath(folder)
        self.verbose = verbose

    # ── Logging ────────────────────────────────────────────

    def log(self, msg):
        if self.verbose:
            print(msg)

    # ── Configuration ──────────────────────────────────────

    def load_config(self):
        """Read book.toml and derive the project settings."""
        config = Config.from_disk(self.folder)
        return RfcBookConfig.from_config(config)

    def path(self, *parts):
        return os.path.join(self.folder, *parts)

    # ── Child processes ────────────────────────────────────

    def call_command(self, program, args, error_msg):
        """
        Run an external tool in the project folder and wait for it.

        Raises DelegatedProcessError if it cannot start or exits non-zero.
        """
        cmd = [find_tool(program)] + list(args)
        self.log(f"  $ {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, cwd=self.folder)
        except OSError as e:
            # FileNotFoundError, PermissionError, missing cwd
            raise DelegatedProcessError(
                error_msg, command=cmd, folder=self.folder
            ) from e

        if result.returncode != 0:
            raise DelegatedProcessError(
                error_msg,
                command=cmd,
                folder=self.folder,
                returncode=result.returncode,
            )

    def mdbook(self, subcommand, error_msg):
        self.call_command("mdbook", [subcommand], error_msg)

    # ── Subcommands ────────────────────────────────────────

    def init(self):
        print("Initializing book... ")
        self.mdbook("init", "Could not initialize book.")
        self.install()

    def install(self):
        rfc = self.load_config()

        packages = ["mdbook"] + rfc.packages
        print(f"Installing preprocessor packages: {packages}... ")
        self.call_command(
            "cargo",
            ["install"] + packages,
            "Installing preprocessor packages failed.",
        )

        for folder in rfc.folders:
            print(f"Creating folder '{folder}'... ")
            path = self.path(folder)
            if os.path.exists(path):
                print(f"Folder '{folder}' exists, no action needed. ")
                continue
            try:
                os.mkdir(path)
            except OSError as e:
                raise FilesystemError(f"Couldn't create folder {folder}.") from e

    def build(self):
        print("Building book... ")
        self.mdbook("build", "Could not build book.")

    def populate(self):
        """Copy the text folder into the book source and rewrite SUMMARY.md."""
        rfc = self.load_config()
        text_dir = self.path(rfc.text_folder)
        src_dir = self.path(rfc.src_folder)

        if not os.path.isdir(text_dir):
            raise FilesystemError(
                f"Text folder '{rfc.text_folder}' not found. Run install first."
            )

        print(f"Populating '{rfc.src_folder}' from '{rfc.text_folder}'... ")
        try:
            pages = gather_pages(text_dir)
            shutil.copytree(
                text_dir,
                src_dir,
                dirs_exist_ok=True,
                ignore=shutil.ignore_patterns(SUMMARY_FILE),
            )
            summary = render_summary(pages)
            with open(os.path.join(src_dir, SUMMARY_FILE), "w", encoding="utf-8") as f:
                f.write(summary)
        except (OSError, UnicodeDecodeError) as e:
            raise FilesystemError(f"Couldn't populate folder {rfc.src_folder}.") from e

        self.log(summary)
        print(f"  ✓ {len(pages)} top-level page(s) in {SUMMARY_FILE}")
        return pages

    def clean(self):
        print("Cleaning book... ")
        self.mdbook("clean", "Could not clean book.")

        rfc = self.load_config()
        path = self.path(rfc.vendor_folder)
        if not os.path.exists(path):
            print(f"Folder '{rfc.vendor_folder}' does not exist, no action needed. ")
            return

        try:
            shutil.rmtree(path)
        except OSError as e:
            raise FilesystemError(f"Couldn't remove folder {rfc.vendor_folder}.") from e

    def watch(self):
        print("Watching book... ")
        self.mdbook("watch", "Could not watch book.")

    def serve(self):
        print("Serving book... ")
        self.mdbook("serve", "Could not serve book.")

    def new(self, name, template=None):
        """Create <text>/<name>.md from <template>/<template>.md."""
        template = template or DEFAULT_TEMPLATE
        _check_page_name(name, "Page")
        _check_page_name(template, "Template")
        rfc = self.load_config()

        template_dir = self.path(rfc.template_folder)
        template_file = os.path.join(template_dir, _md_name(template))
        if not os.path.isfile(template_file):
            available = _list_templates(template_dir)
            hint = f" Available: {', '.join(available)}" if available else ""
            raise FilesystemError(
                f"Template '{template}' not found in '{rfc.template_folder}'.{hint}"
            )

        target = self.path(rfc.text_folder, _md_name(name))
        if os.path.exists(target):
            raise FilesystemError(f"Page '{os.path.relpath(target, self.folder)}' already exists.")

        print(f"Creating page '{os.path.relpath(target, self.folder)}' from template '{template}'... ")
        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
            shutil.copyfile(template_file, target)
        except OSError as e:
            raise FilesystemError(f"Couldn't create page {name}.") from e

        return target


def _check_page_name(name, kind):
    """Names are single file names inside their folder."""
    if not name or "/" in name or "\\" in name or os.sep in name or ".." in name:
        raise FilesystemError(
            f"{kind} name '{name}' must be a plain file name without '/' or '..'."
        )


def _md_name(name):
    return name if name.lower().endswith(".md") else f"{name}.md"


def _list_templates(template_dir):
    if not os.path.isdir(template_dir):
        return []
    return sorted(
        os.path.splitext(entry)[0]
        for entry in os.listdir(template_dir)
        if entry.lower().endswith(".md")
    )
