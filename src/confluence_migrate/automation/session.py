"""Wiki session: remote page primitives built on the automation interface."""

from typing import Any, Optional
from urllib.parse import quote

from loguru import logger

from .driver import Locator, PageAutomation
from .exceptions import ElementNotFoundError, ImportFlowError, LoginError
from .retry import RetryPolicy
from ..config.config import PageConfig, UiSelectors, WikiConfig


class MacroSpec:
    """Rendering macro for an attached file."""

    def __init__(self, name: str, search_term: str, element_id: str):
        """Initialize macro spec.

        Args:
            name: Human readable macro name
            search_term: Text typed into the macro browser search
            element_id: Id of the macro entry in the macro browser
        """
        self.name = name
        self.search_term = search_term
        self.element_id = element_id

    def __repr__(self) -> str:
        return f'MacroSpec({self.name!r})'


EXCEL_MACRO = MacroSpec('Excel', 'Excel', 'macro-viewxls')
PDF_MACRO = MacroSpec('Pdf', 'Pdf', 'macro-viewpdf')
SLIDES_MACRO = MacroSpec('Slides', 'PowerPoint', 'macro-viewppt')


class WikiSession:
    """The single stateful browser session against one Confluence space.

    The session tracks one current page and, while an editor is open, the
    editor frame. Operations leave the browser on the page they acted on so
    the next operation can build on it. Not safe for concurrent use.
    """

    def __init__(
        self,
        automation: PageAutomation,
        wiki: WikiConfig,
        retry: Optional[RetryPolicy] = None,
        pages: Optional[PageConfig] = None,
        ui: Optional[UiSelectors] = None,
    ):
        """Initialize wiki session.

        Args:
            automation: Page automation channel
            wiki: Target wiki settings
            retry: Retry policy for transient failures
            pages: Page naming and content settings
            ui: Element identifiers
        """
        self.automation = automation
        self.wiki = wiki
        self.retry = retry or RetryPolicy()
        self.pages = pages or PageConfig()
        self.ui = ui or UiSelectors()
        self.in_editor = False
        self.logger = logger.bind(component='WikiSession')

    @property
    def space_root_url(self) -> str:
        return self.wiki.space_root_url

    def page_url(self, page_name: str) -> str:
        return f'{self.space_root_url}/{quote(page_name)}'

    def goto_space_root(self) -> None:
        self._navigate(self.space_root_url)

    def goto_page(self, page_name: str) -> None:
        self._navigate(self.page_url(page_name))

    def _navigate(self, url: str) -> None:
        # A page load always leaves any editor frame
        self.in_editor = False
        self.automation.navigate(url)

    def login(self) -> None:
        """Log in through the login form.

        Raises:
            LoginError: If the form cannot be filled in or does not go away
        """
        ids = self.ui.login_ids(self.wiki.is_testing)
        self.logger.info(f'Logging in to {self.wiki.base_url} as {self.wiki.username}')

        try:
            self._navigate(self.wiki.login_url)
            self.retry.run(
                lambda: self._type(Locator.by_id(ids['username']), self.wiki.username)
            )
            self._type(Locator.by_id(ids['password']), self.wiki.password)
            self._click(Locator.by_id(ids['button']))
            self.retry.run(
                lambda: not self._is_present(Locator.by_id(ids['password'])),
                check=bool,
            )
        except Exception as e:
            raise LoginError(f'Login to {self.wiki.base_url} failed: {e}') from e

        self.logger.info('Login succeeded')

    def page_exists(self, page_name: str) -> bool:
        """Check whether a page exists in the target space.

        A page counts as existing only when the rendered title is not a
        not-found title and the secondary title does not say otherwise.
        """
        self.goto_page(page_name)
        not_found = set(self.pages.not_found_titles)

        try:
            title = self.retry.run(
                lambda: self.automation.read_text(
                    self.automation.find(Locator.by_id(self.ui.page_title))
                )
            )
        except Exception as e:
            self.logger.warning(
                f'No title rendered for page {page_name!r}, treating as missing: {e}'
            )
            return False

        if title.strip() in not_found:
            return False

        # A page of another space may render the requested title
        secondary = self._text_if_present(Locator.by_css(self.ui.secondary_title_css))
        if secondary is not None and secondary.strip() in not_found:
            return False

        return True

    def create_page(self, title: str, body: str = '') -> None:
        """Create a child page of the current page and publish it."""
        self.logger.debug(f'Creating page {title!r}')
        self.retry.run(lambda: self._click(Locator.by_id(self.ui.quick_create)))
        self.retry.run(lambda: self._type(Locator.by_id(self.ui.content_title), title))

        editor = self.open_editor_frame()
        if body:
            self.automation.send_keys(editor, body)
        self.close_editor()
        self.publish()
        self.logger.info(f'Created page {title!r}')

    def open_editor(self) -> Any:
        """Open the edit view of the current page.

        Returns:
            Editor body element (the session is inside the editor frame)
        """
        self.retry.run(lambda: self._click(Locator.by_id(self.ui.edit_page_link)))
        return self.open_editor_frame()

    def open_editor_frame(self) -> Any:
        self.retry.run(lambda: self.automation.switch_to_frame(self.ui.editor_frame))
        self.in_editor = True
        return self.automation.find(Locator.by_id(self.ui.editor_body))

    def close_editor(self) -> None:
        """Leave the editor frame, keeping the edit view open."""
        if self.in_editor:
            self.automation.switch_to_parent()
            self.in_editor = False

    def publish(self) -> None:
        """Publish the open edit view and verify it was saved.

        The edit view disappears when the save took effect; while the editor
        frame is still present the publish is clicked again.
        """
        clicked = []

        def attempt() -> bool:
            editor_frame = Locator.by_id(self.ui.editor_frame)
            if clicked and not self._is_present(editor_frame):
                return True
            self._click(Locator.by_id(self.ui.publish_button))
            clicked.append(True)
            return not self._is_present(editor_frame)

        self.retry.run(attempt, check=bool)

    def prepend_to_body(self, text: str) -> None:
        """Insert text at the top of the current page and publish."""
        editor = self.open_editor()
        self.automation.click(editor)
        self.automation.move_caret_to_start(editor)
        self.automation.send_keys(editor, text)
        self.close_editor()
        self.publish()

    def add_provenance_note(self) -> None:
        self.prepend_to_body(self.pages.provenance_note)

    def attach_file(self, file_path: str) -> None:
        """Upload a file as attachment of the current page."""
        self._open_action_menu()
        self._click(Locator.by_id(self.ui.attachments_link))
        self.retry.run(
            lambda: self._type(Locator.by_id(self.ui.attachment_file_input), file_path)
        )
        self.automation.submit(
            self.automation.find(Locator.by_id(self.ui.attachment_upload_form))
        )
        self.retry.run(lambda: self._click(Locator.by_id(self.ui.view_page_link)))
        self.logger.debug(f'Attached {file_path}')

    def open_word_import(self) -> None:
        self._open_action_menu()
        self._click(Locator.by_id(self.ui.import_word_link))

    def import_word_document(self, file_path: str) -> None:
        """Run the import-word-document flow on the current page.

        After submitting, waits until the import form is gone or an error
        banner shows up.

        Raises:
            ImportFlowError: If the import form reports an error
            ConditionNotMetError: If the import neither finishes nor fails
        """
        self.open_word_import()
        self.retry.run(
            lambda: self._type(Locator.by_id(self.ui.word_file_input), file_path)
        )
        self._click(Locator.by_id(self.ui.word_next_button))
        self.retry.run(
            lambda: self._click(Locator.by_id(self.ui.word_overwrite_option))
        )
        self.automation.submit(
            self.automation.find(Locator.by_id(self.ui.word_import_form))
        )

        error = self.retry.run(self._word_import_result, check=lambda r: r is not None)
        if error:
            raise ImportFlowError(f'Word import reported: {error}')

    def _word_import_result(self) -> Optional[str]:
        """Error text, empty when the import finished, None while pending."""
        error = self._text_if_present(Locator.by_css(self.ui.word_import_error_css))
        if error is not None:
            return error.strip() or 'unknown error'
        if self._is_present(Locator.by_id(self.ui.word_import_form)):
            return None
        return ''

    def insert_attachment_macro(self, macro: MacroSpec) -> None:
        """Append a rendering macro for the attached file and publish."""
        editor = self.open_editor()
        self.automation.click(editor)
        self.automation.move_caret_to_end(editor)
        self.close_editor()

        self._click(Locator.by_id(self.ui.insert_menu))
        self._click(Locator.by_id(self.ui.insert_macro))
        self._type(Locator.by_id(self.ui.macro_search), macro.search_term)
        self._click(Locator.by_id(macro.element_id))

        # The upload may not be indexed yet
        self.retry.run(
            lambda: self.automation.read_text(
                self.automation.find(Locator.by_id(self.ui.macro_param_name))
            ),
            check=lambda text: text.strip() != self.ui.no_attachments_text,
        )
        self._click(Locator.by_css(self.ui.dialog_ok_css))

        self.open_editor_frame()
        self.retry.run(
            lambda: self.automation.find(Locator.by_class(self.ui.inline_macro_class))
        )
        self.close_editor()
        self.publish()

    def embed_first_attached_image(self) -> None:
        """Embed the first attached file as image and publish."""
        self.retry.run(lambda: self._click(Locator.by_id(self.ui.edit_page_link)))

        def caret_to_end() -> None:
            try:
                editor = self.open_editor_frame()
                self.automation.move_caret_to_end(editor)
            finally:
                self.close_editor()

        self.retry.run(caret_to_end)

        self._click(Locator.by_css(self.ui.insert_files_trigger_css))
        self.retry.run(self._click_first_attached_file)
        self._click(Locator.by_css(self.ui.dialog_insert_css))

        self.open_editor_frame()
        self.retry.run(
            lambda: self.automation.find(Locator.by_class(self.ui.embedded_image_class))
        )
        self.close_editor()
        self.publish()

    def _click_first_attached_file(self) -> None:
        files = self.automation.find_all(Locator.by_css(self.ui.attached_file_css))
        if not files:
            raise ElementNotFoundError(
                'No attached file offered yet', locator=self.ui.attached_file_css
            )
        self.automation.click(files[0])

    def _open_action_menu(self) -> None:
        self.retry.run(lambda: self._click(Locator.by_id(self.ui.action_menu)))

    def _click(self, locator: Locator) -> None:
        self.automation.click(self.automation.find(locator))

    def _type(self, locator: Locator, text: str) -> None:
        self.automation.send_keys(self.automation.find(locator), text)

    def _is_present(self, locator: Locator) -> bool:
        try:
            self.automation.find(locator)
        except ElementNotFoundError:
            return False
        return True

    def _text_if_present(self, locator: Locator) -> Optional[str]:
        try:
            element = self.automation.find(locator)
        except ElementNotFoundError:
            return None
        return self.automation.read_text(element)

    def close(self) -> None:
        self.automation.close()
