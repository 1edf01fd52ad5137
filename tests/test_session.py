"""Tests for the wiki session primitives."""

from typing import Callable, Optional

import pytest

from confluence_migrate.automation.driver import Locator
from confluence_migrate.automation.exceptions import (
    ConditionNotMetError,
    ImportFlowError,
    LoginError,
)
from confluence_migrate.automation.retry import RetryPolicy
from confluence_migrate.automation.session import PDF_MACRO, WikiSession
from confluence_migrate.config.config import UiSelectors, WikiConfig

from conftest import FakeAutomation, FakeElement

UI = UiSelectors()
FRAME = Locator.by_id(UI.editor_frame)
PUBLISH = Locator.by_id(UI.publish_button)


def make_session(
    automation: FakeAutomation,
    is_testing: bool = False,
    sleep: Optional[Callable[[float], None]] = None,
) -> WikiSession:
    wiki = WikiConfig(
        base_url='https://wiki.example.com/',
        space='DOCS',
        username='migrator',
        password='secret',
        is_testing=is_testing,
    )
    policy = RetryPolicy(max_attempts=3, delay=0, sleep=sleep or (lambda s: None))
    return WikiSession(automation, wiki, retry=policy)


def add_editor(automation: FakeAutomation) -> None:
    """Edit view whose frame goes away when publish is clicked."""
    automation.add(FRAME)
    automation.add(Locator.by_id(UI.editor_body))
    automation.add(PUBLISH)
    automation.add(Locator.by_id(UI.edit_page_link))
    automation.add(Locator.by_id(UI.quick_create))
    automation.add(Locator.by_id(UI.content_title))
    automation.on_click[PUBLISH] = lambda: automation.remove(FRAME)
    automation.on_click[Locator.by_id(UI.edit_page_link)] = lambda: automation.add(FRAME)
    automation.on_click[Locator.by_id(UI.quick_create)] = lambda: automation.add(FRAME)


def clicks_on(automation: FakeAutomation, locator: Locator) -> int:
    return len([a for a in automation.named('click') if a[1] == locator])


class TestNavigation:
    """Test page addressing."""

    def test_page_url(self):
        session = make_session(FakeAutomation())

        assert session.space_root_url == 'https://wiki.example.com/display/DOCS'
        assert (
            session.page_url('Quarterly Report')
            == 'https://wiki.example.com/display/DOCS/Quarterly%20Report'
        )

    def test_goto_space_root(self):
        automation = FakeAutomation()
        session = make_session(automation)

        session.goto_space_root()

        assert automation.url == 'https://wiki.example.com/display/DOCS'


class TestPageExists:
    """Test the page existence heuristic."""

    def setup_method(self):
        """Set up test fixtures."""
        self.automation = FakeAutomation()
        self.session = make_session(self.automation)
        self.title = Locator.by_id(UI.page_title)
        self.secondary = Locator.by_css(UI.secondary_title_css)

    def test_existing_page(self):
        """Test a real title without a secondary message means existing."""
        self.automation.add(self.title, 'Quarterly Report')

        assert self.session.page_exists('Quarterly Report')
        assert self.automation.url.endswith('/display/DOCS/Quarterly%20Report')

    @pytest.mark.parametrize('title', ['Page Not Found', 'Space Tools'])
    def test_not_found_titles(self, title):
        """Test the not-found title sentinels."""
        self.automation.add(self.title, title)

        assert not self.session.page_exists('Anything')

    def test_secondary_title_not_found(self):
        """Test a not-found secondary title overrides the page title."""
        self.automation.add(self.title, 'Report')
        self.automation.add(self.secondary, 'Page Not Found')

        assert not self.session.page_exists('Report')

    def test_secondary_title_other_text(self):
        """Test an unrelated secondary message does not hide the page."""
        self.automation.add(self.title, 'Report')
        self.automation.add(self.secondary, 'This page is archived')

        assert self.session.page_exists('Report')

    def test_title_never_rendered(self):
        """Test a missing title after all retries counts as missing."""
        assert not self.session.page_exists('Report')

        lookups = [a for a in self.automation.named('find') if a[1] == self.title]
        assert len(lookups) == 3

    def test_title_rendered_late(self):
        """Test the title lookup is retried."""
        self.automation.add(self.title, 'Report')
        self.automation.absent_for[self.title] = 2

        assert self.session.page_exists('Report')


class TestLogin:
    """Test the login flow."""

    def _login_form(self, automation, ids):
        automation.add(Locator.by_id(ids[0]))
        automation.add(Locator.by_id(ids[1]))
        automation.add(Locator.by_id(ids[2]))
        automation.on_click[Locator.by_id(ids[2])] = lambda: automation.remove(
            Locator.by_id(ids[1])
        )

    def test_production_login(self):
        """Test the production login page and field ids."""
        automation = FakeAutomation()
        self._login_form(automation, ('username', 'password', 'login'))
        session = make_session(automation)

        session.login()

        assert automation.url == 'https://wiki.example.com/login'
        assert automation.elements[Locator.by_id('username')].keys == ['migrator']
        assert clicks_on(automation, Locator.by_id('login')) == 1

    def test_testing_login(self):
        """Test the test instance login page and field ids."""
        automation = FakeAutomation()
        self._login_form(automation, ('os_username', 'os_password', 'loginButton'))
        session = make_session(automation, is_testing=True)

        session.login()

        assert automation.url == 'https://wiki.example.com/login.action'
        assert automation.elements[Locator.by_id('os_username')].keys == ['migrator']
        assert ('send_keys', Locator.by_id('os_password'), 'secret') in automation.actions

    def test_username_field_slow_to_render(self):
        automation = FakeAutomation()
        self._login_form(automation, ('username', 'password', 'login'))
        automation.absent_for[Locator.by_id('username')] = 2

        make_session(automation).login()

        assert automation.elements[Locator.by_id('username')].keys == ['migrator']

    def test_login_form_persists(self):
        """Test rejected credentials raise LoginError."""
        automation = FakeAutomation()
        self._login_form(automation, ('username', 'password', 'login'))
        automation.on_click.clear()

        with pytest.raises(LoginError) as exc_info:
            make_session(automation).login()

        assert isinstance(exc_info.value.__cause__, ConditionNotMetError)

    def test_login_page_missing(self):
        """Test an unreachable login form raises LoginError."""
        with pytest.raises(LoginError):
            make_session(FakeAutomation()).login()


class TestEditing:
    """Test page creation, publishing and body edits."""

    def setup_method(self):
        """Set up test fixtures."""
        self.automation = FakeAutomation()
        add_editor(self.automation)

    def test_create_page_with_body(self):
        """Test quick create, title, body and publish."""
        session = make_session(self.automation)

        session.create_page('Q1', 'Some body')

        assert self.automation.elements[Locator.by_id(UI.content_title)].keys == ['Q1']
        assert self.automation.elements[Locator.by_id(UI.editor_body)].keys == [
            'Some body'
        ]
        assert clicks_on(self.automation, PUBLISH) == 1
        assert not session.in_editor
        assert self.automation.frames == []

    def test_create_page_without_body(self):
        """Test a parent page gets no body text."""
        make_session(self.automation).create_page('Finance', '')

        assert self.automation.elements[Locator.by_id(UI.editor_body)].keys == []

    def test_publish_retried_until_saved(self):
        """Test publish is clicked again while the editor stays open."""
        clicks = []

        def on_publish():
            clicks.append(True)
            if len(clicks) == 2:
                self.automation.remove(FRAME)

        self.automation.on_click[PUBLISH] = on_publish
        session = make_session(self.automation)

        session.publish()

        assert clicks_on(self.automation, PUBLISH) == 2

    def test_publish_not_repeated_after_late_save(self):
        """Test a save that lands after the check is not published twice."""
        self.automation.on_click[PUBLISH] = lambda: None
        session = make_session(
            self.automation, sleep=lambda s: self.automation.remove(FRAME)
        )

        session.publish()

        assert clicks_on(self.automation, PUBLISH) == 1

    def test_publish_never_takes_effect(self):
        self.automation.on_click[PUBLISH] = lambda: None

        with pytest.raises(ConditionNotMetError):
            make_session(self.automation).publish()

    def test_add_provenance_note(self):
        """Test the note is typed at the start of the body."""
        session = make_session(self.automation)

        session.add_provenance_note()

        body = Locator.by_id(UI.editor_body)
        assert self.automation.elements[body].keys == [session.pages.provenance_note]
        caret = self.automation.named('caret_start')
        assert caret == [('caret_start', body)]
        assert clicks_on(self.automation, PUBLISH) == 1

    def test_navigation_leaves_editor(self):
        session = make_session(self.automation)
        session.open_editor()
        assert session.in_editor

        session.goto_page('Other')

        assert not session.in_editor


class TestAttachments:
    """Test the attachment upload flow."""

    def test_attach_file(self):
        automation = FakeAutomation()
        for element_id in (
            UI.action_menu,
            UI.attachments_link,
            UI.attachment_file_input,
            UI.attachment_upload_form,
            UI.view_page_link,
        ):
            automation.add(Locator.by_id(element_id))

        make_session(automation).attach_file('/import/Finance/report.pdf')

        file_input = automation.elements[Locator.by_id(UI.attachment_file_input)]
        assert file_input.keys == ['/import/Finance/report.pdf']
        assert automation.named('submit') == [
            ('submit', Locator.by_id(UI.attachment_upload_form))
        ]
        assert clicks_on(automation, Locator.by_id(UI.view_page_link)) == 1


class TestWordImport:
    """Test the import-word-document flow."""

    def setup_method(self):
        """Set up test fixtures."""
        self.automation = FakeAutomation()
        for element_id in (
            UI.action_menu,
            UI.import_word_link,
            UI.word_file_input,
            UI.word_next_button,
            UI.word_overwrite_option,
            UI.word_import_form,
        ):
            self.automation.add(Locator.by_id(element_id))
        self.form = Locator.by_id(UI.word_import_form)
        self.automation.on_submit[self.form] = lambda: self.automation.remove(self.form)

    def test_import_succeeds(self):
        make_session(self.automation).import_word_document('/import/Plan.docx')

        assert self.automation.elements[Locator.by_id(UI.word_file_input)].keys == [
            '/import/Plan.docx'
        ]
        assert clicks_on(self.automation, Locator.by_id(UI.word_overwrite_option)) == 1
        assert self.automation.named('submit') == [
            ('submit', Locator.by_id(UI.word_import_form))
        ]

    def test_import_reports_error(self):
        """Test an error banner after submit raises ImportFlowError."""
        self.automation.add(
            Locator.by_css(UI.word_import_error_css), ' Unsupported document '
        )

        with pytest.raises(ImportFlowError, match='Unsupported document'):
            make_session(self.automation).import_word_document('/import/Plan.doc')

    def test_import_waits_for_late_error(self):
        """Test a banner rendered after a delay is still reported."""
        del self.automation.on_submit[self.form]

        def show_banner(seconds):
            self.automation.add(Locator.by_css(UI.word_import_error_css), 'Too large')

        session = make_session(self.automation, sleep=show_banner)

        with pytest.raises(ImportFlowError, match='Too large'):
            session.import_word_document('/import/Plan.docx')

    def test_import_waits_for_form_to_close(self):
        """Test success is only reported once the import form is gone."""
        del self.automation.on_submit[self.form]
        sleeps = []

        def finish_import(seconds):
            sleeps.append(seconds)
            self.automation.remove(self.form)

        make_session(self.automation, sleep=finish_import).import_word_document(
            '/import/Plan.docx'
        )

        assert len(sleeps) == 1

    def test_import_never_finishes(self):
        del self.automation.on_submit[self.form]

        with pytest.raises(ConditionNotMetError):
            make_session(self.automation).import_word_document('/import/Plan.docx')


class TestMacrosAndImages:
    """Test macro insertion and image embedding."""

    def setup_method(self):
        """Set up test fixtures."""
        self.automation = FakeAutomation()
        add_editor(self.automation)

    def _macro_browser(self) -> FakeElement:
        for element_id in (UI.insert_menu, UI.insert_macro, UI.macro_search):
            self.automation.add(Locator.by_id(element_id))
        self.automation.add(Locator.by_id(PDF_MACRO.element_id))
        self.automation.add(Locator.by_css(UI.dialog_ok_css))
        self.automation.add(Locator.by_class(UI.inline_macro_class))
        return self.automation.add(
            Locator.by_id(UI.macro_param_name), UI.no_attachments_text
        )

    def test_insert_macro_waits_for_attachment(self):
        """Test the macro dialog is polled until the attachment is offered."""
        param = self._macro_browser()

        def index_attachment(seconds):
            param.text = 'report.pdf'

        session = make_session(self.automation, sleep=index_attachment)

        session.insert_attachment_macro(PDF_MACRO)

        search = self.automation.elements[Locator.by_id(UI.macro_search)]
        assert search.keys == ['Pdf']
        assert clicks_on(self.automation, Locator.by_id('macro-viewpdf')) == 1
        assert clicks_on(self.automation, Locator.by_css(UI.dialog_ok_css)) == 1
        assert clicks_on(self.automation, PUBLISH) == 1
        lookups = [
            a
            for a in self.automation.named('find')
            if a[1] == Locator.by_id(UI.macro_param_name)
        ]
        assert len(lookups) == 2

    def test_insert_macro_attachment_never_indexed(self):
        self._macro_browser()

        with pytest.raises(ConditionNotMetError):
            make_session(self.automation).insert_attachment_macro(PDF_MACRO)

        assert clicks_on(self.automation, Locator.by_css(UI.dialog_ok_css)) == 0

    def test_embed_first_attached_image(self):
        """Test the first offered attachment is inserted into the body."""
        attached = Locator.by_css(UI.attached_file_css)
        first = FakeElement(attached, 'diagram.png')

        def offer_files(seconds):
            self.automation.lists[attached] = [first, FakeElement(attached, 'old.png')]

        self.automation.add(Locator.by_css(UI.insert_files_trigger_css))
        self.automation.add(Locator.by_css(UI.dialog_insert_css))
        self.automation.add(Locator.by_class(UI.embedded_image_class))
        session = make_session(self.automation, sleep=offer_files)

        session.embed_first_attached_image()

        clicked = [a for a in self.automation.named('click') if a[1] == attached]
        assert len(clicked) == 1
        assert ('caret_end', Locator.by_id(UI.editor_body)) in self.automation.actions
        assert clicks_on(self.automation, PUBLISH) == 1
        assert not session.in_editor
