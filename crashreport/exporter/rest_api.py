import logging
import os
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from crashreport.config import load_settings
from crashreport.utils.detector import has_signal
from crashreport.utils.pipeline import build_executor, run_report_cycle
from crashreport.utils.report import gather_all_errors
from crashreport.utils.send_issue import create_github_issue, generate_summary

logger = logging.getLogger("crashreport.api")

# —— 配置与执行器：整个进程共用一个，提权认证只做一次 —— #
settings = load_settings()
executor = build_executor(settings)

# —— CORS 设置 —— #
# 只允许本机页面调用，接口会触发提权命令
origins = ["http://127.0.0.1", "http://localhost"]

app = FastAPI(title="Crash Reporter")
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


# 请求体模型
class SubmitRequest(BaseModel):
    notes: Optional[str] = None


# 所有接口都是 async 且内部同步阻塞执行，采集流程在事件循环上串行，不会并发

@app.post("/")
async def root():
    """根路径：运行状态提示"""
    return {"message": "Crash Reporter is running. Try POST /report"}


@app.post("/escalation/preauth")
async def preauth():
    """提前触发一次 pkexec 认证"""
    authenticated = executor.preauthenticate()
    return {"authenticated": authenticated}


@app.post("/report")
async def report():
    """采集并返回汇总报告，不提交"""
    aggregated = gather_all_errors(executor, settings)
    return {
        "report": aggregated.text,
        "has_errors": has_signal(aggregated.evidence()),
        "sections": list(aggregated.titles),
    }


@app.post("/report/submit")
async def submit(req: Optional[SubmitRequest] = None):
    """完整流程：采集、检测、生成摘要并提交 issue"""
    notes = req.notes if req else None
    result = run_report_cycle(
        settings,
        executor,
        notes=notes,
        summarize=generate_summary,
        submit=create_github_issue,
    )
    if result.has_errors and not result.submitted:
        return JSONResponse(status_code=502, content=result.to_dict())
    return result.to_dict()


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    host = os.environ.get("CRASHREPORT_HOST", "127.0.0.1")
    port = int(os.environ.get("CRASHREPORT_PORT", "8002"))
    if os.geteuid() != 0:
        logger.warning("未以 root 运行，部分日志需要通过 pkexec 提权读取")
    uvicorn.run(app, host=host, port=port)


"""
运行命令：
uvicorn crashreport.exporter.rest_api:app --host 127.0.0.1 --port 8002
报告：curl -X POST http://127.0.0.1:8002/report
文档：http://127.0.0.1:8002/docs
"""

if __name__ == '__main__':
    main()
