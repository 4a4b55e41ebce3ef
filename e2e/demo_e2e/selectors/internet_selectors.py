# e2e/demo_e2e/selectors/internet_selectors.py

BASE_URL = "https://the-internet.herokuapp.com"

# ダウンロード / アップロード
DOWNLOAD_PATH = "/download"
DOWNLOAD_LINK_SELECTOR = "div.example a"
UPLOAD_PATH = "/upload"
UPLOAD_INPUT_SELECTOR = "input#file-upload"
UPLOAD_SUBMIT_SELECTOR = "input#file-submit"
UPLOAD_HEADING_SELECTOR = "h3"
UPLOAD_HEADING_TEXT = "File Uploaded!"
UPLOADED_FILES_SELECTOR = "#uploaded-files"

# フローティングメニュー
FLOATING_MENU_PATH = "/floating_menu"
FLOATING_MENU_SELECTOR = "#menu"
FLOATING_MENU_LINKS = ("Home", "News", "Contact", "About")
FLOATING_MENU_SCREENSHOT = "floating-menu-after-scroll.png"

# jQuery UI メニュー
JQUERY_MENU_PATH = "/jqueryui/menu"
JQUERY_ENABLED_SELECTOR = "#ui-id-3"
JQUERY_DOWNLOADS_SELECTOR = "#ui-id-4"
JQUERY_CSV_SELECTOR = "#ui-id-8"
JQUERY_DISABLED_ITEM_SELECTOR = "#menu li.ui-state-disabled"
JQUERY_DISABLED_ITEM_TEXT = "Disabled"

# 通知メッセージ（"unsuccesful" の typo はサイト側のまま）
NOTIFICATION_PATH = "/notification_message_rendered"
NOTIFICATION_LINK_SELECTOR = "a[href='/notification_message']"
FLASH_SELECTOR = "#flash"
FLASH_CLOSE_MARK = "×"
NOTIFICATION_MESSAGES = (
    "Action successful",
    "Action unsuccessful, please try again",
    "Action unsuccesful, please try again",
)

# キー入力
KEY_PRESSES_PATH = "/key_presses"
KEY_RESULT_SELECTOR = "#result"
KEY_RESULT_PREFIX = "You entered: "
