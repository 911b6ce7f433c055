"""테이블 및 API 모델"""
