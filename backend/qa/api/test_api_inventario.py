"""
Tests de API - Inventario general, inventario por negocio y movimientos
"""


class TestInventarioGeneralAPI:

    def test_crear_y_obtener(self, client, producto_id):
        r = client.get(f"/inventario-general/{producto_id}")
        assert r.status_code == 200
        body = r.json()
        assert body["nombre"] == "Queso Cheddar"
        assert body["stock"] == 45.0
        assert body["estado"] == "disponible"

    def test_producto_inexistente_404(self, client):
        assert client.get("/inventario-general/no-existe").status_code == 404

    def test_salida_con_movimiento(self, client, producto_id):
        r = client.post(f"/inventario-general/{producto_id}/salida", json={"cantidad": 40, "motivo": "Consumo"})
        assert r.status_code == 200
        body = r.json()
        assert body["producto"]["stock"] == 5.0
        assert body["producto"]["estado"] == "bajo"
        assert body["movimiento"]["tipo"] == "salida"
        assert body["movimiento"]["producto_nombre"] == "Queso Cheddar"

    def test_salida_insuficiente_409(self, client, producto_id):
        r = client.post(f"/inventario-general/{producto_id}/salida", json={"cantidad": 50})
        assert r.status_code == 409
        assert r.json()["detail"]["disponible"] == 45.0
        assert client.get(f"/inventario-general/{producto_id}").json()["stock"] == 45.0
        assert client.get(f"/inventario-general/{producto_id}/movimientos").json() == []

    def test_cantidad_invalida_400(self, client, producto_id):
        r = client.post(f"/inventario-general/{producto_id}/entrada", json={"cantidad": 0})
        assert r.status_code == 400

    def test_editar_stock_no_permitido(self, client, producto_id):
        r = client.patch(f"/inventario-general/{producto_id}", json={"stock": 1})
        assert r.status_code == 422

    def test_editar_a_medio(self, client, producto_id):
        r = client.patch(f"/inventario-general/{producto_id}", json={"estado": "medio"})
        assert r.status_code == 200
        assert r.json()["estado"] == "medio"

    def test_ajuste_y_historial(self, client, producto_id):
        client.post(f"/inventario-general/{producto_id}/entrada", json={"cantidad": 5})
        client.post(f"/inventario-general/{producto_id}/ajuste", json={"cantidad": -2, "motivo": "Merma"})
        historial = client.get(f"/inventario-general/{producto_id}/movimientos").json()
        assert [m["tipo"] for m in historial] == ["ajuste", "entrada"]
        assert client.get(f"/inventario-general/{producto_id}").json()["stock"] == 48.0

    def test_eliminar_logico_y_restaurar(self, client, producto_id):
        assert client.delete(f"/inventario-general/{producto_id}").json()["activo"] is False
        assert client.get("/inventario-general").json() == []
        assert client.post(f"/inventario-general/{producto_id}/restaurar").json()["activo"] is True

    def test_eliminar_permanente_con_movimientos_400(self, client, producto_id):
        client.post(f"/inventario-general/{producto_id}/entrada", json={"cantidad": 1})
        assert client.delete(f"/inventario-general/{producto_id}/permanente").status_code == 400

    def test_buscar_y_categorias(self, client, producto_id):
        assert [p["id"] for p in client.get("/inventario-general/buscar", params={"q": "cheddar"}).json()] == [producto_id]
        assert client.get("/inventario-general/categorias").json() == ["Lácteos"]


class TestInventarioDetalladoAPI:

    def test_agregar_producto_al_negocio(self, client, negocio_id):
        r = client.post(f"/negocios/{negocio_id}/inventario", json={"nombre": "Pan", "stock": 20, "stock_minimo": 5})
        assert r.status_code == 201
        assert r.json()["negocio_id"] == negocio_id
        movimientos = client.get(f"/movimientos/negocio/{negocio_id}").json()
        assert [m["tipo"] for m in movimientos] == ["entrada"]

    def test_negocio_inexistente_404(self, client):
        assert client.get("/negocios/no-existe/inventario").status_code == 404

    def test_salida_en_negocio(self, client, negocio_id):
        pan = client.post(f"/negocios/{negocio_id}/inventario", json={"nombre": "Pan", "stock": 20}).json()
        r = client.post(f"/negocios/{negocio_id}/inventario/{pan['id']}/salida", json={"cantidad": 20})
        assert r.status_code == 200
        assert r.json()["producto"]["estado"] == "agotado"
        assert r.json()["producto"]["negocio_id"] == negocio_id


class TestMovimientosAPI:

    def test_revertir(self, client, producto_id):
        mov = client.post(f"/inventario-general/{producto_id}/entrada", json={"cantidad": 5}).json()["movimiento"]
        r = client.post(f"/movimientos/{mov['id']}/revertir", json={"motivo": "Duplicado"})
        assert r.status_code == 200
        assert r.json()["movimiento"]["movimiento_revertido_id"] == mov["id"]
        assert r.json()["producto"]["stock"] == 45.0
        assert client.post(f"/movimientos/{mov['id']}/revertir", json={}).status_code == 400

    def test_estadisticas_y_por_tipo(self, client, producto_id):
        client.post(f"/inventario-general/{producto_id}/entrada", json={"cantidad": 1})
        client.post(f"/inventario-general/{producto_id}/salida", json={"cantidad": 1})
        stats = client.get("/movimientos/estadisticas").json()
        assert stats["entradas"] == 1 and stats["salidas"] == 1
        assert len(client.get("/movimientos/tipo/salida").json()) == 1

    def test_movimiento_inexistente_404(self, client):
        assert client.get("/movimientos/no-existe").status_code == 404
