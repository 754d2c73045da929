"""
Utility modules - 색공간 변환, 색차 계산, 이미지/파일 보조 함수
"""
