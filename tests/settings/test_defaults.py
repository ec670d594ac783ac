import curito


async def test_declared_public_interface_and_promised_defaults():
    settings = curito.WaiterSettings()
    assert settings.waiting.interval == 10
    assert settings.waiting.timeout == 360
    assert settings.waiting.overall_timeout == 1200
    assert settings.waiting.strategy is curito.ReadinessStrategy.EXACT
    assert settings.networking.request_timeout == 60
    assert settings.networking.connect_timeout is None
    assert settings.networking.error_backoffs == (1, 1, 2, 3, 5, 8)
    assert settings.cluster.namespace is None
    assert settings.cluster.label_key == 'component'


async def test_settings_are_independent():
    settings1 = curito.WaiterSettings()
    settings2 = curito.WaiterSettings()
    settings1.waiting.interval = 1
    settings1.cluster.namespace = 'ns1'
    assert settings2.waiting.interval == 10
    assert settings2.cluster.namespace is None
