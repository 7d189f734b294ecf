#!/usr/bin/env python3
"""
스크립트 저장소 사용 예제

임시 디렉토리에 사용자 저장소를 만들고 스크립트 생성, 조회, HAR 변환을 실행합니다.
"""

import asyncio
import json
import tempfile
from pathlib import Path

from scriptrepo.config.settings import Settings
from scriptrepo.models.base import FileEntry, User
from scriptrepo.scripts import FileEntryService
from scriptrepo.utils.logging import setup_logging

SAMPLE_HAR = {
    "log": {
        "entries": [
            {
                "request": {
                    "method": "GET",
                    "url": "http://example.com/",
                    "headers": [{"name": "User-Agent", "value": "example"}],
                },
                "response": {
                    "status": 200,
                    "headers": [{"name": "Content-Type", "value": "text/html"}],
                },
            }
        ]
    }
}


async def main():
    work_dir = Path(tempfile.mkdtemp())
    settings = Settings(
        repository_root_dir=str(work_dir / "repos"),
        announcement_file=str(work_dir / "announcement.conf")
    )
    setup_logging(settings)

    service = FileEntryService(settings)
    user = User(user_id="demo", user_name="데모")

    try:
        print("=== 퀵 테스트 생성 ===")
        path = await service.prepare_new_entry_for_quick_test(
            user, "http://example.com/", service.get_script_handler("groovy")
        )
        print(f"생성된 스크립트: {path}")

        print("\n=== 스크립트 수정 ===")
        entry = await service.get_one(user, path)
        entry.content += "\n// 수정됨\n"
        entry.description = "주석 추가"
        revision = await service.save(user, entry)
        print(f"새 리비전: r{revision}")

        print("\n=== 전체 목록 ===")
        for each in await service.get_all(user):
            print(f"- [{each.file_type.value}] {each.path} (r{each.last_revision}) {each.description}")

        print("\n=== HAR 변환 ===")
        scripts = service.convert_to_script(json.dumps(SAMPLE_HAR), True)
        print(scripts["jython"])

        await service.save(user, FileEntry(path="har/TestRunner.py", content=scripts["jython"], encoding="UTF-8"))
        await service.write_content_to(user, "har", work_dir / "agent")
        print(f"내보낸 파일: {sorted(p.name for p in (work_dir / 'agent').iterdir())}")
    finally:
        service.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
