"""Frontier Narrative Core

하위 패키지:
- generation: 시드 기반 절차 생성 (이름, NPC, 퀘스트, 조우, 대화, 월드)
- dialogue: 대화 트리 런타임
- quest: 퀘스트 상태 머신
- economy: 조건부 가격 보정
"""
__version__ = "0.1.0"
