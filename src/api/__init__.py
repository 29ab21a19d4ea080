"""API — camada de borda HTTP com o wiki.

Responsabilidades:
- Construir requisições (URL, headers, corpo)
- Manter cookies e estado de autenticação do transporte
- Limitar concorrência de operações
- Decodificar respostas para modelos tipados
- Obter e injetar tokens CSRF

Subpastas:
- connectors/: sessões HTTP por destino

NÃO PODE conter: regras de publicação, coordenação de workers, notificações de domínio.
"""
