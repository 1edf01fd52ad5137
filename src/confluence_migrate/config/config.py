"""Configuration management for the Confluence folder migration tool."""

from typing import Dict, List, Optional, Any
import codecs
from pathlib import Path
import os

from pydantic import BaseModel, Field, validator
import yaml
from dotenv import load_dotenv

ENCODING_ERROR_HANDLERS = ('strict', 'replace', 'ignore', 'backslashreplace')

DEFAULT_PROVENANCE_NOTE = (
    'Note: This page was imported from share point. '
    'The original document had been attached as an attachment.\n'
)


class WikiConfig(BaseModel):
    """Configuration for the target Confluence instance."""

    base_url: str = Field(..., description='Confluence base address')
    space: str = Field(..., description='Target space key')
    username: str = Field(..., description='Login user name')
    password: str = Field(..., description='Login password')
    is_testing: bool = Field(
        default=False,
        description='Test instance: uses the legacy login page and field ids',
    )

    @validator('base_url')
    def validate_base_url(cls, v):
        """Validate base URL format."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('URL must start with http:// or https://')
        return v.rstrip('/')

    @validator('space')
    def validate_space(cls, v):
        """Validate space key is not blank."""
        if not v.strip():
            raise ValueError('Space key must not be empty')
        return v.strip()

    @property
    def space_root_url(self) -> str:
        return f'{self.base_url}/display/{self.space}'

    @property
    def login_url(self) -> str:
        return self.base_url + ('/login.action' if self.is_testing else '/login')


class SourceConfig(BaseModel):
    """Source folder configuration."""

    root: str = Field(..., description='Folder to import from')
    migrated_suffix: str = Field(
        default='.migrated', description='Suffix appended to migrated files'
    )
    encoding: str = Field(default='utf-8', description='Encoding of plain text files')
    encoding_errors: str = Field(
        default='replace', description='Handling of undecodable bytes in text files'
    )

    @validator('root')
    def validate_root(cls, v):
        """Strip trailing separators from the import root."""
        stripped = v.rstrip('/\\')
        return stripped or v

    @validator('migrated_suffix')
    def validate_migrated_suffix(cls, v):
        """Validate sentinel suffix."""
        if not v.startswith('.') or len(v) < 2:
            raise ValueError('migrated_suffix must start with a dot')
        return v

    @validator('encoding')
    def validate_encoding(cls, v):
        """Validate the encoding is known."""
        try:
            codecs.lookup(v)
        except LookupError:
            raise ValueError(f'Unknown encoding: {v}')
        return v

    @validator('encoding_errors')
    def validate_encoding_errors(cls, v):
        """Validate the decode error handler."""
        if v not in ENCODING_ERROR_HANDLERS:
            allowed = ', '.join(ENCODING_ERROR_HANDLERS)
            raise ValueError(f'encoding_errors must be one of {allowed}')
        return v


class RetryConfig(BaseModel):
    """Retry settings for remote interactions."""

    max_attempts: int = Field(default=10, description='Attempts per operation')
    delay: float = Field(default=1.0, description='Seconds between attempts')

    @validator('max_attempts')
    def validate_max_attempts(cls, v):
        """Validate attempts is positive."""
        if v <= 0:
            raise ValueError('max_attempts must be positive')
        return v

    @validator('delay')
    def validate_delay(cls, v):
        """Validate delay is not negative."""
        if v < 0:
            raise ValueError('delay must not be negative')
        return v


class BrowserConfig(BaseModel):
    """Browser automation settings."""

    name: str = Field(default='firefox', description='Browser to drive')
    headless: bool = Field(default=False, description='Run browser headless')
    page_load_timeout: int = Field(
        default=60, description='Page load timeout in seconds'
    )

    @validator('name')
    def validate_name(cls, v):
        """Validate browser name."""
        v = v.lower()
        if v not in ('firefox', 'chrome'):
            raise ValueError('Browser must be one of: firefox, chrome')
        return v


class PageConfig(BaseModel):
    """Page naming and content settings."""

    not_found_titles: List[str] = Field(
        default_factory=lambda: ['Page Not Found', 'Space Tools'],
        description='Rendered titles meaning the page does not exist',
    )
    provenance_note: str = Field(
        default=DEFAULT_PROVENANCE_NOTE,
        description='Note added to every imported page',
    )
    conflict_prefix: str = Field(
        default='Conflict page', description='Prefix of conflict page names'
    )
    name_replacements: Dict[str, str] = Field(
        default_factory=lambda: {'+': ' and ', '&': ' and '},
        description='Literal substrings replaced in page names',
    )
    stripped_characters: str = Field(
        default='()[]{}<>|\\/:;#^@',
        description='Characters removed from page names',
    )

    @validator('not_found_titles')
    def validate_not_found_titles(cls, v):
        """At least one not-found title is required."""
        if not v:
            raise ValueError('not_found_titles must not be empty')
        return v


class UiSelectors(BaseModel):
    """Element identifiers of the Confluence web UI."""

    login_username: str = 'username'
    login_password: str = 'password'
    login_button: str = 'login'
    testing_login_username: str = 'os_username'
    testing_login_password: str = 'os_password'
    testing_login_button: str = 'loginButton'

    page_title: str = 'title-text'
    secondary_title_css: str = 'div#content div.aui-message p.title'

    quick_create: str = 'quick-create-page-button'
    content_title: str = 'content-title'
    editor_frame: str = 'wysiwygTextarea_ifr'
    editor_body: str = 'tinymce'
    publish_button: str = 'rte-button-publish'
    edit_page_link: str = 'editPageLink'
    view_page_link: str = 'viewPageLink'
    action_menu: str = 'action-menu-link'

    attachments_link: str = 'view-attachments-link'
    attachment_file_input: str = 'file_0'
    attachment_upload_form: str = 'upload-attachments'

    import_word_link: str = 'import-word-doc'
    word_file_input: str = 'filename'
    word_next_button: str = 'next'
    word_overwrite_option: str = 'overwritepage'
    word_import_form: str = 'importwordform'
    word_import_error_css: str = 'div.aui-message.error'

    insert_menu: str = 'rte-button-insert'
    insert_macro: str = 'rte-insert-macro'
    macro_search: str = 'macro-browser-search'
    macro_param_name: str = 'macro-param-name'
    no_attachments_text: str = 'No appropriate attachments'
    dialog_ok_css: str = '.button-panel-button.ok'
    inline_macro_class: str = 'editor-inline-macro'

    insert_files_trigger_css: str = (
        '#confluence-insert-files a.toolbar-trigger.aui-button'
    )
    attached_file_css: str = '#attached-files ul.file-list li.attached-file'
    dialog_insert_css: str = '.button-panel-button.insert'
    embedded_image_class: str = 'confluence-embedded-image'

    def login_ids(self, is_testing: bool) -> Dict[str, str]:
        """Login form element ids for the given environment."""
        if is_testing:
            return {
                'username': self.testing_login_username,
                'password': self.testing_login_password,
                'button': self.testing_login_button,
            }
        return {
            'username': self.login_username,
            'password': self.login_password,
            'button': self.login_button,
        }


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default='INFO', description='Log level')
    file: Optional[str] = Field(default=None, description='Log file path')
    format: str = Field(
        default='{time:YYYY-MM-DD HH:mm:ss} | {level} | {name} | {message}',
        description='Log format',
    )

    @validator('level')
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {valid_levels}')
        return v.upper()


class Config(BaseModel):
    """Main configuration class for the migration tool."""

    wiki: WikiConfig = Field(..., description='Target Confluence instance')
    source: SourceConfig = Field(..., description='Source folder')
    retry: RetryConfig = Field(
        default_factory=RetryConfig, description='Retry settings'
    )
    browser: BrowserConfig = Field(
        default_factory=BrowserConfig, description='Browser settings'
    )
    pages: PageConfig = Field(
        default_factory=PageConfig, description='Page naming settings'
    )
    ui: UiSelectors = Field(
        default_factory=UiSelectors, description='Confluence UI element ids'
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description='Logging settings'
    )

    class Config:
        """Pydantic configuration."""

        extra = 'forbid'  # Don't allow extra fields

    @classmethod
    def from_file(cls, config_path: str) -> 'Config':
        """Load configuration from YAML file."""
        config_file = Path(config_path)

        if not config_file.exists():
            raise FileNotFoundError(f'Configuration file not found: {config_path}')

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        if not isinstance(config_data, dict):
            raise ValueError(f'Configuration file is not a mapping: {config_path}')

        return cls(**config_data)

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables."""
        # Load .env file if it exists
        load_dotenv()

        config_data = {
            'wiki': {
                'base_url': os.getenv('WIKI_BASE_URL'),
                'space': os.getenv('WIKI_SPACE'),
                'username': os.getenv('WIKI_USERNAME'),
                'password': os.getenv('WIKI_PASSWORD'),
                'is_testing': os.getenv('WIKI_IS_TESTING', 'false').lower() == 'true',
            },
            'source': {
                'root': os.getenv('IMPORT_FROM'),
                'migrated_suffix': os.getenv('MIGRATED_SUFFIX'),
                'encoding': os.getenv('SOURCE_ENCODING'),
                'encoding_errors': os.getenv('SOURCE_ENCODING_ERRORS'),
            },
            'retry': {
                'max_attempts': int(os.getenv('RETRY_MAX_ATTEMPTS', 10)),
                'delay': float(os.getenv('RETRY_DELAY', 1.0)),
            },
            'browser': {
                'name': os.getenv('BROWSER', 'firefox'),
                'headless': os.getenv('BROWSER_HEADLESS', 'false').lower() == 'true',
            },
            'logging': {
                'level': os.getenv('LOG_LEVEL', 'INFO'),
                'file': os.getenv('LOG_FILE'),
            },
        }

        # Remove None values
        config_data = cls._remove_none_values(config_data)

        return cls(**config_data)

    @staticmethod
    def _remove_none_values(data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively remove None values from dictionary."""
        if isinstance(data, dict):
            return {
                k: Config._remove_none_values(v)
                for k, v in data.items()
                if v is not None
            }
        return data

    def to_file(self, config_path: str) -> None:
        """Save configuration to YAML file."""
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(
                self.dict(), f, default_flow_style=False, indent=2, sort_keys=False
            )

    @staticmethod
    def create_template(output_path: str) -> None:
        """Create a configuration template file."""
        template_config = {
            'wiki': {
                'base_url': 'https://wiki.example.com',
                'space': 'DOCS',
                'username': 'migration-user',
                'password': 'your-password',
                'is_testing': False,
            },
            'source': {
                'root': '/data/sharepoint-export',
                'migrated_suffix': '.migrated',
                'encoding': 'utf-8',
                'encoding_errors': 'replace',
            },
            'retry': {
                'max_attempts': 10,
                'delay': 1.0,
            },
            'browser': {
                'name': 'firefox',
                'headless': False,
                'page_load_timeout': 60,
            },
            'pages': {
                'not_found_titles': ['Page Not Found', 'Space Tools'],
                'conflict_prefix': 'Conflict page',
            },
            'logging': {
                'level': 'INFO',
                'file': 'migration.log',
                'format': '{time:YYYY-MM-DD HH:mm:ss} | {level} | {name} | {message}',
            },
        }

        config_file = Path(output_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(
                template_config, f, default_flow_style=False, indent=2, sort_keys=False
            )
