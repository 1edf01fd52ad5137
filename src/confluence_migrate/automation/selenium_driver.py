"""Selenium WebDriver implementation of the page automation interface."""

from typing import Any, List, Optional

from loguru import logger
from selenium import webdriver
from selenium.common.exceptions import NoSuchElementException, WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.common.keys import Keys

from .driver import Locator, PageAutomation
from .exceptions import AutomationError, ElementNotFoundError

_BY = {
    'id': By.ID,
    'css': By.CSS_SELECTOR,
    'class': By.CLASS_NAME,
}


class SeleniumAutomation(PageAutomation):
    """Drive a real browser through Selenium."""

    def __init__(self, driver: Any):
        """Initialize with an already started WebDriver.

        Args:
            driver: Selenium WebDriver instance
        """
        self.driver = driver
        self.logger = logger.bind(component='SeleniumAutomation')

    @classmethod
    def start(
        cls,
        browser: str = 'firefox',
        headless: bool = False,
        page_load_timeout: Optional[int] = None,
    ) -> 'SeleniumAutomation':
        """Start a browser and wrap it.

        Args:
            browser: 'firefox' or 'chrome'
            headless: Run without a visible window
            page_load_timeout: Page load timeout in seconds

        Returns:
            Automation adapter bound to the new browser
        """
        if browser == 'chrome':
            options = webdriver.ChromeOptions()
            if headless:
                options.add_argument('--headless=new')
            driver = webdriver.Chrome(options=options)
        elif browser == 'firefox':
            options = webdriver.FirefoxOptions()
            if headless:
                options.add_argument('-headless')
            driver = webdriver.Firefox(options=options)
        else:
            raise ValueError(f'Unsupported browser: {browser}')

        if page_load_timeout:
            driver.set_page_load_timeout(page_load_timeout)

        logger.info(f'Started {browser} browser (headless={headless})')
        return cls(driver)

    def _by(self, locator: Locator) -> str:
        try:
            return _BY[locator.strategy]
        except KeyError:
            raise ValueError(f'Unsupported locator strategy: {locator.strategy}')

    def navigate(self, url: str) -> None:
        self.logger.debug(f'Navigating to {url}')
        try:
            self.driver.get(url)
        except WebDriverException as e:
            raise AutomationError(f'Navigation to {url} failed: {e.msg}')

    def find(self, locator: Locator) -> Any:
        try:
            return self.driver.find_element(self._by(locator), locator.value)
        except NoSuchElementException:
            raise ElementNotFoundError(
                f'Element not found: {locator}', locator=str(locator)
            )
        except WebDriverException as e:
            raise AutomationError(
                f'Lookup of {locator} failed: {e.msg}', locator=str(locator)
            )

    def find_all(self, locator: Locator) -> List[Any]:
        try:
            return self.driver.find_elements(self._by(locator), locator.value)
        except WebDriverException as e:
            raise AutomationError(
                f'Lookup of {locator} failed: {e.msg}', locator=str(locator)
            )

    def click(self, element: Any) -> None:
        self._call(element.click)

    def send_keys(self, element: Any, text: str) -> None:
        self._call(element.send_keys, text)

    def move_caret_to_start(self, element: Any) -> None:
        self._call(element.send_keys, Keys.CONTROL + Keys.HOME)

    def move_caret_to_end(self, element: Any) -> None:
        self._call(element.send_keys, Keys.CONTROL + Keys.END)

    def submit(self, element: Any) -> None:
        self._call(element.submit)

    def read_text(self, element: Any) -> str:
        try:
            return element.text
        except WebDriverException as e:
            raise AutomationError(f'Reading element text failed: {e.msg}')

    def switch_to_frame(self, frame_id: str) -> None:
        try:
            self.driver.switch_to.frame(frame_id)
        except WebDriverException as e:
            raise ElementNotFoundError(
                f'Frame {frame_id} not available: {e.msg}', locator=frame_id
            )

    def switch_to_parent(self) -> None:
        self._call(self.driver.switch_to.parent_frame)

    def close(self) -> None:
        try:
            self.driver.quit()
        except WebDriverException as e:
            self.logger.warning(f'Error while closing browser: {e.msg}')

    def _call(self, func, *args) -> None:
        try:
            func(*args)
        except WebDriverException as e:
            raise AutomationError(f'Browser interaction failed: {e.msg}')
