# e2e/demo_e2e/flows/files_flow.py
from __future__ import annotations

from typing import Any, Dict, List

from demo_e2e.core.locators import css
from demo_e2e.core.types import Act, Assert, Navigate, Step
from demo_e2e.selectors import internet_selectors as S


def build_download_upload(params: Dict[str, Any]) -> List[Step]:
    """
    1件目のファイルをダウンロード -> シナリオ専用の downloads/ に保存 -> そのままアップロード。
    アップロード結果にダウンロード時の suggested filename がそのまま出ること。
    """
    base = params.get("base_url", S.BASE_URL)
    nth = int(params.get("link_index", 0))
    return [
        Navigate(base + S.DOWNLOAD_PATH),
        Act("download", css(S.DOWNLOAD_LINK_SELECTOR, nth=nth), params={"into": "download"}),
        Assert("file_exists", expected="${download_path}"),
        Navigate(base + S.UPLOAD_PATH),
        Act("set_input_files", css(S.UPLOAD_INPUT_SELECTOR), params={"files": "${download_path}"}),
        Act("click", css(S.UPLOAD_SUBMIT_SELECTOR)),
        Assert("text", expected=S.UPLOAD_HEADING_TEXT, target=css(S.UPLOAD_HEADING_SELECTOR)),
        Assert("text", expected="${download_name}", target=css(S.UPLOADED_FILES_SELECTOR)),
    ]
