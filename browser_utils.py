# browser_utils.py

import logging

from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service as ChromeService
from selenium.webdriver.common.by import By
from selenium.webdriver.common.keys import Keys
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.wait import WebDriverWait
from webdriver_manager.chrome import ChromeDriverManager

from exceptions import BrowserError, ElementNotFoundError

logger = logging.getLogger(__name__)


def selector_locator(selector):
    """Map a selector string to a Selenium locator: XPath when it starts with '/' or '(', CSS otherwise."""
    if selector.startswith(("/", "(")):
        return By.XPATH, selector
    return By.CSS_SELECTOR, selector


class SeleniumBrowser:
    """Chrome driven through chromedriver. One instance owns one driver process, one session and one page."""

    def __init__(self):
        self.service = None
        self.driver = None
        self.headless = True

    def launch(self, headless=True):
        """Start chromedriver and return its control URL."""
        self.headless = headless
        try:
            logger.info("Starting chromedriver...")
            self.service = ChromeService(ChromeDriverManager().install())
            self.service.start()
        except (WebDriverException, OSError, ValueError) as e:
            raise BrowserError(f"failed to launch chromedriver: {e}") from e
        logger.debug(f"chromedriver listening at {self.service.service_url}")
        return self.service.service_url

    def connect(self, endpoint):
        options = Options()
        options.add_argument("--no-sandbox")
        options.add_argument("--disable-dev-shm-usage")
        options.add_experimental_option("excludeSwitches", ["enable-logging"])
        if self.headless:
            options.add_argument("--headless=new")

        try:
            self.driver = webdriver.Remote(command_executor=endpoint, options=options)
        except WebDriverException as e:
            raise BrowserError(f"failed to connect to browser at {endpoint}: {e}") from e
        logger.info("Browser session created successfully")
        return self.driver

    def open(self, url):
        try:
            self.driver.get(url)
        except WebDriverException as e:
            raise BrowserError(f"failed to open page {url}: {e}") from e
        return self.driver

    def locate(self, selector, timeout, clickable=False):
        condition = EC.element_to_be_clickable if clickable else EC.visibility_of_element_located
        try:
            return WebDriverWait(self.driver, timeout).until(condition(selector_locator(selector)))
        except TimeoutException as e:
            raise ElementNotFoundError(f"no element matched within {timeout}s") from e
        except WebDriverException as e:
            raise BrowserError(str(e)) from e

    def set_value(self, element, text):
        try:
            element.clear()
            element.send_keys(text)
        except WebDriverException as e:
            raise BrowserError(f"failed to set value: {e}") from e

    def submit(self, element):
        try:
            element.send_keys(Keys.RETURN)
        except WebDriverException as e:
            raise BrowserError(f"failed to press Enter: {e}") from e

    def click(self, element):
        try:
            element.click()
        except WebDriverException as e:
            raise BrowserError(f"failed to click: {e}") from e

    def read_text(self, element):
        try:
            return element.text
        except WebDriverException as e:
            raise BrowserError(f"failed to read text: {e}") from e

    def close(self):
        """Quit the browser and stop chromedriver. Safe to call on a partially started session."""
        errors = []
        if self.driver:
            logger.info("Closing browser session...")
            try:
                self.driver.quit()
            except Exception as e:
                errors.append(f"quit failed: {e}")
            self.driver = None
        if self.service:
            try:
                self.service.stop()
            except Exception as e:
                errors.append(f"chromedriver stop failed: {e}")
            self.service = None
        if errors:
            raise BrowserError("; ".join(errors))
        logger.info("Browser session closed.")


if __name__ == "__main__":
    # Manual check that Chrome and chromedriver start on this machine
    logging.basicConfig(level=logging.INFO, format="%(levelname)s - %(message)s")

    browser = SeleniumBrowser()
    try:
        browser.connect(browser.launch(headless=False))
        browser.open("https://aws.amazon.com")
        input("Press Enter to close the browser...")
    finally:
        browser.close()
