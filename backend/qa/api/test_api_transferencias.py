"""
Tests de API - Transferencias, negocios, reportes, notificaciones y configuración
"""


class TestTransferenciasAPI:

    def test_transferencia_exitosa(self, client, producto_id, negocio_id):
        r = client.post("/transferencias", json={
            "negocio_id": negocio_id, "producto_general_id": producto_id, "cantidad": 10, "stock_minimo": 5,
        })
        assert r.status_code == 201
        body = r.json()
        assert body["stock"] == 10.0
        assert body["estado"] == "disponible"
        assert body["producto_general_id"] == producto_id
        assert client.get(f"/inventario-general/{producto_id}").json()["stock"] == 35.0
        assert len(client.get(f"/negocios/{negocio_id}/inventario").json()) == 1

    def test_transferencia_insuficiente_sin_efectos(self, client, producto_id, negocio_id):
        r = client.post("/transferencias", json={
            "negocio_id": negocio_id, "producto_general_id": producto_id, "cantidad": 50, "stock_minimo": 5,
        })
        assert r.status_code == 409
        assert r.json()["detail"]["disponible"] == 45.0
        assert client.get(f"/inventario-general/{producto_id}").json()["stock"] == 45.0
        assert client.get(f"/negocios/{negocio_id}/inventario").json() == []
        assert client.get("/movimientos").json() == []

    def test_minimo_invalido_400(self, client, producto_id, negocio_id):
        r = client.post("/transferencias", json={
            "negocio_id": negocio_id, "producto_general_id": producto_id, "cantidad": 10, "stock_minimo": 0,
        })
        assert r.status_code == 400


class TestNegociosAPI:

    def test_eliminar_desactiva_productos(self, client, negocio_id):
        client.post(f"/negocios/{negocio_id}/inventario", json={"nombre": "Pan"})
        r = client.delete(f"/negocios/{negocio_id}")
        assert r.status_code == 200
        assert r.json()["productos_desactivados"] == 1
        assert client.get("/negocios").json() == []
        assert client.post(f"/negocios/{negocio_id}/restaurar").json()["activo"] is True

    def test_conteos(self, client, negocio_id):
        client.post(f"/negocios/{negocio_id}/inventario", json={"nombre": "Pan"})
        assert client.get("/negocios/conteos").json() == {negocio_id: 1}


class TestReportesAPI:

    def test_dashboard(self, client, producto_id):
        client.post(f"/inventario-general/{producto_id}/salida", json={"cantidad": 40})
        stats = client.get("/reportes/dashboard").json()
        assert stats["total_productos"] == 1
        assert stats["valor_total"] == 600.0
        assert stats["productos_bajo_stock"] == 1
        assert stats["movimientos_recientes"][0]["producto_nombre"] == "Queso Cheddar"

    def test_reporte_periodo(self, client, producto_id):
        client.post(f"/inventario-general/{producto_id}/salida", json={"cantidad": 5})
        r = client.get("/reportes", params={"periodo": "weekly"})
        assert r.status_code == 200
        body = r.json()
        assert body["periodo"] == "weekly"
        assert body["kpis"]["perdidas_periodo"] == 600.0
        assert len(body["tendencia"]) == 7
        assert sum(d["valor"] for d in body["distribucion_movimientos"]) == 100

    def test_reporte_vacio(self, client):
        body = client.get("/reportes", params={"periodo": "daily"}).json()
        assert body["kpis"]["valor_inventario"] == 0.0
        assert body["top_productos"] == []

    def test_periodo_invalido_422(self, client):
        assert client.get("/reportes", params={"periodo": "semestral"}).status_code == 422

    def test_reporte_negocio_inexistente_404(self, client):
        assert client.get("/reportes", params={"negocio_id": "no-existe"}).status_code == 404


class TestNotificacionesYConfiguracionAPI:

    def test_alerta_y_marcar_leida(self, client, producto_id):
        client.post(f"/inventario-general/{producto_id}/salida", json={"cantidad": 45})
        notificaciones = client.get("/notificaciones", params={"solo_no_leidas": True}).json()
        assert [n["titulo"] for n in notificaciones] == ["Producto agotado"]
        r = client.post(f"/notificaciones/{notificaciones[0]['id']}/leida")
        assert r.json()["leida"] is True
        assert client.get("/notificaciones", params={"solo_no_leidas": True}).json() == []

    def test_monedas_por_defecto_y_tasa(self, client):
        assert client.get("/configuracion/monedas").json() == {
            "tasa_cambio_bcv": 50.0, "iva": 16.0, "moneda_principal": "USD", "moneda_secundaria": "VES",
        }
        assert client.put("/configuracion/monedas/tasa-bcv", json={"tasa": 36.5}).status_code == 200
        assert client.get("/configuracion/monedas").json()["tasa_cambio_bcv"] == 36.5
        assert client.put("/configuracion/monedas/tasa-bcv", json={"tasa": -1}).status_code == 400

    def test_crud_configuracion(self, client):
        r = client.post("/configuracion", json={"clave": "nombre_empresa", "valor": "La Arepera"})
        assert r.status_code == 201
        assert client.patch("/configuracion/nombre_empresa", json={"valor": "El Fogón"}).json()["valor"] == "El Fogón"
        assert client.delete("/configuracion/nombre_empresa").status_code == 204
        assert client.get("/configuracion/nombre_empresa").status_code == 404
