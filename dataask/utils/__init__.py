"""쿼리 엔진 유틸리티: 통계 헬퍼, 파서, 실행기, 저장소"""
