"""CQS 패키지 — 커맨드/쿼리 메시지와 mediator.

Command/query separation package. Routers build a command or query
message and hand it to the mediator together with an execution context;
the mediator checks the handler's permission and runs it.

Modules:
    base: 메시지 베이스 클래스 및 실행 컨텍스트 (Message bases and ExecutionContext)
    mediator: 핸들러 등록 및 실행 (Handler registration and dispatch)
    registry: 도메인 핸들러 등록 (Wires every domain operation into the mediator)
"""
