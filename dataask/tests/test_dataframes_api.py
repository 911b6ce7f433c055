"""
DataFrame API Tests

이 모듈은 테이블 등록/조회/삭제 및 표현식 실행 API 엔드포인트들을 테스트합니다.
"""

import pytest
from fastapi.testclient import TestClient

from dataask.main import app
from dataask.routers import dataframes
from dataask.utils.dataframe_store import store

client = TestClient(app)


class TestDataFramesAPI:
    """DataFrame API 테스트 클래스"""

    def setup_method(self):
        """테스트 설정"""
        store.clear()
        self.payload = {
            "name": "test_data.csv",
            "records": [
                {"id": 1, "marketing_spend": 1000, "sales": 50, "region": "North"},
                {"id": 2, "marketing_spend": 2000, "sales": 95, "region": "South"},
                {"id": 3, "marketing_spend": 1500, "sales": 75, "region": "North"},
                {"id": 4, "marketing_spend": 2500, "sales": 120, "region": None},
                {"id": 5, "marketing_spend": 3000, "sales": 140, "region": "South"},
            ]
        }

    def teardown_method(self):
        store.clear()
        dataframes.configure_executor({})

    def _create(self) -> str:
        response = client.post("/api/dataframes", json=self.payload)
        assert response.status_code == 201
        return response.json()["id"]

    def test_root_and_health(self):
        assert client.get("/").json()["status"] == "healthy"

        health = client.get("/health")
        assert health.status_code == 200
        assert health.json()["status"] == "healthy"

    def test_create_dataframe(self):
        response = client.post("/api/dataframes", json=self.payload)

        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "test_data.csv"
        assert body["shape"] == [5, 4]
        assert body["columns"] == ["id", "marketing_spend", "sales", "region"]
        assert body["dtypes"]["sales"] == "numeric"
        assert body["dtypes"]["region"] == "text"

    def test_create_dataframe_with_invalid_dtype(self):
        payload = dict(self.payload, dtypes={"sales": "float64"})
        response = client.post("/api/dataframes", json=payload)
        assert response.status_code == 422

    def test_list_get_delete(self):
        table_id = self._create()

        listed = client.get("/api/dataframes").json()
        assert [item["id"] for item in listed] == [table_id]

        detail = client.get(f"/api/dataframes/{table_id}")
        assert detail.status_code == 200
        assert detail.json()["non_null_counts"]["region"] == 4

        deleted = client.delete(f"/api/dataframes/{table_id}")
        assert deleted.status_code == 200
        assert deleted.json()["success"] is True

        missing = client.get(f"/api/dataframes/{table_id}")
        assert missing.status_code == 404
        assert missing.json()["error"]["type"] == "TableNotFound"

    def test_execute_expression(self):
        table_id = self._create()

        response = client.post(f"/api/dataframes/{table_id}/execute", json={"code": "df.head(2)"})
        assert response.status_code == 200
        body = response.json()
        assert body["row_count"] == 2
        assert body["columns"] == ["id", "marketing_spend", "sales", "region"]
        assert body["execution_time_ms"] >= 0

    def test_execute_regression(self):
        table_id = self._create()

        response = client.post(
            f"/api/dataframes/{table_id}/execute",
            json={"code": "stats.linregress(df['marketing_spend'], df['sales'])"}
        )
        assert response.status_code == 200
        row = response.json()["data"][0]
        assert row["analysis_type"] == "Linear Regression"
        assert row["sample_size"] == 5

    def test_execute_missing_column_returns_400(self):
        table_id = self._create()

        response = client.post(
            f"/api/dataframes/{table_id}/execute",
            json={"code": "stats.trend_analysis(df['nonexistent'])"}
        )
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["type"] == "ColumnNotFoundException"
        assert error["message"] == "Column 'nonexistent' not found"
        assert error["details"]["missing_columns"] == ["nonexistent"]

    @pytest.mark.parametrize("code, error_type", [
        ("stats.forecast(invalid_syntax)", "InvalidSyntaxException"),
        ("stats.forecast(df['sales'], periods=25)", "DomainException"),
    ])
    def test_execute_engine_errors(self, code, error_type):
        table_id = self._create()

        response = client.post(f"/api/dataframes/{table_id}/execute", json={"code": code})
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["error"]["type"] == error_type

    def test_execute_strict_mode(self):
        table_id = self._create()
        dataframes.configure_executor({"strict_mode": True})

        response = client.post(f"/api/dataframes/{table_id}/execute", json={"code": "df.unknown()"})
        assert response.status_code == 400
        assert response.json()["error"]["type"] == "UnsupportedOperationException"

    def test_execute_unknown_table(self):
        response = client.post("/api/dataframes/missing/execute", json={"code": "df.head()"})
        assert response.status_code == 404

    def test_execute_blank_code(self):
        table_id = self._create()
        response = client.post(f"/api/dataframes/{table_id}/execute", json={"code": "   "})
        assert response.status_code == 422

    def test_non_finite_values_serialized_as_null(self):
        payload = {"name": "flat", "records": [{"v": 5}, {"v": 5}, {"v": 5}]}
        table_id = client.post("/api/dataframes", json=payload).json()["id"]

        response = client.post(
            f"/api/dataframes/{table_id}/execute",
            json={"code": "stats.ttest_1samp(df['v'], 3)"}
        )
        assert response.status_code == 200
        row = response.json()["data"][0]
        assert row["t_statistic"] is None
        assert row["p_value"] == 0
